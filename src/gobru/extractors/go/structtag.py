from __future__ import annotations

import json


def parse_struct_tag(tag: str) -> dict[str, str]:
    """
    Parse a Go struct tag (`json:"name,omitempty" binding:"required"`) into an
    ordered mapping.

    Follows the conventional key:"value" grammar used by Go's reflect.StructTag:
    keys are runs of non-space, non-quote, non-colon characters, values are
    double-quoted with Go escapes. Parsing stops at the first malformed pair;
    pairs read before it are kept. A repeated key keeps its first value.
    """
    out: dict[str, str] = {}
    i = 0
    n = len(tag)

    while i < n:
        while i < n and tag[i] == " ":
            i += 1
        if i >= n:
            break

        start = i
        while i < n and tag[i] > " " and tag[i] not in ':"' and ord(tag[i]) != 0x7F:
            i += 1
        if i == start or i + 1 >= n or tag[i] != ":" or tag[i + 1] != '"':
            break
        key = tag[start:i]

        i += 1  # ':'
        value_start = i
        i += 1  # opening quote
        while i < n and tag[i] != '"':
            if tag[i] == "\\":
                i += 1
            i += 1
        if i >= n:
            break
        quoted = tag[value_start : i + 1]
        i += 1

        value = _unquote_value(quoted)
        if value is None:
            break
        out.setdefault(key, value)

    return out


def _unquote_value(quoted: str) -> str | None:
    try:
        value = json.loads(quoted)
    except ValueError:
        return None
    return value if isinstance(value, str) else None
