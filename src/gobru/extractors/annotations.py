from __future__ import annotations

import re
from typing import Iterable

# Tag vocabulary. Each pattern is matched at the start of a trimmed comment line.
_NAME = re.compile(r"^@name\s+(.+)$")
_ROUTE = re.compile(r"^@route\s+([A-Z]+)\s+(.+)$")
_BODY = re.compile(r"^@body\s+([A-Za-z_][A-Za-z0-9_.]*)")
_DESCRIPTION = re.compile(r"^@description(?:\s+(.*))?$")

_WS = re.compile(r"\s+")
_TAG_START = re.compile(r"^@(?:name|route|body|description)\b")

AnnotationSet = dict[str, str]


def _starts_tag(line: str) -> bool:
    # a malformed tag line still ends a running description
    return _TAG_START.match(line) is not None


def extract_annotations(lines: Iterable[str]) -> AnnotationSet:
    """
    Read the annotation tags out of one doc comment (markers already stripped).

    Keys produced: name, route_method, route_path, body, description.
      - @name: last occurrence wins
      - @route, @body, @description: first occurrence wins
      - @description keeps collecting following lines until a line starts with a
        tag keyword, well-formed or not; whitespace is collapsed to single spaces
    Lines matching nothing are ignored.
    """
    result: AnnotationSet = {}
    collecting: list[str] | None = None

    for raw in lines:
        line = raw.strip()

        if collecting is not None:
            if not _starts_tag(line):
                collecting.append(line)
                continue
            result["description"] = _WS.sub(" ", " ".join(collecting)).strip()
            collecting = None

        m = _ROUTE.match(line)
        if m:
            if "route_method" not in result:
                result["route_method"] = m.group(1)
                result["route_path"] = m.group(2).strip()
            continue

        m = _NAME.match(line)
        if m:
            result["name"] = m.group(1).strip()
            continue

        m = _BODY.match(line)
        if m:
            result.setdefault("body", m.group(1))
            continue

        m = _DESCRIPTION.match(line)
        if m:
            if "description" not in result:
                collecting = [m.group(1) or ""]
            continue

    if collecting is not None:
        result["description"] = _WS.sub(" ", " ".join(collecting)).strip()

    return result


def has_route(annotations: AnnotationSet) -> bool:
    return bool(annotations.get("route_method")) and bool(annotations.get("route_path"))
