from __future__ import annotations

from typing import Any

from gobru.diagnostics import Diagnostics
from gobru.domain.models import BodySchema, RequestDescriptor, Route

DEFAULT_BASE_URL = "{{baseUrl}}"

# encoding/json never emits a field tagged exactly `json:"-"`; `json:"-,"` names it "-"
_SKIP_JSON_TAG = "-"


def default_value(semantic_type: str) -> Any:
    if semantic_type == "string":
        return ""
    if semantic_type in ("integer", "float"):
        return 0
    if semantic_type == "boolean":
        return False
    if semantic_type == "array":
        return []
    if semantic_type == "map":
        return {}
    return None


def body_default_values(schema: BodySchema, diagnostics: Diagnostics | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {}
    for field in schema.fields:
        if field.tags.get("json") == _SKIP_JSON_TAG:
            continue
        if field.wire_name in body and diagnostics is not None:
            diagnostics.warning(
                "duplicate-wire-name",
                f"{schema.type_name}.{field.declared_name} reuses JSON name {field.wire_name!r}; last field wins",
            )
        body[field.wire_name] = default_value(field.semantic_type)
    return body


def build_descriptor(
    route: Route,
    base_url: str = DEFAULT_BASE_URL,
    diagnostics: Diagnostics | None = None,
) -> RequestDescriptor:
    has_body = route.request_body is not None
    return RequestDescriptor(
        name=route.display_name,
        method=route.method,
        url=base_url + route.path,
        has_body=has_body,
        body_default_values=body_default_values(route.request_body, diagnostics) if has_body else None,
        description=route.description,
    )
