from __future__ import annotations

from typing import Optional

from gobru.diagnostics import Diagnostics
from gobru.domain.models import BodySchema, Route
from gobru.resolve.schema import SchemaResolver


def assemble_routes(
    routes: list[Route],
    resolver: SchemaResolver,
    diagnostics: Diagnostics,
) -> list[Route]:
    """
    Attach request bodies to discovered routes.

    Each distinct body type name is resolved once; a not-found result is cached
    too. Routes keep their discovery order. Routes without @body pass through.
    """
    cache: dict[str, Optional[BodySchema]] = {}

    for route in routes:
        name = route.body_type_name
        if not name:
            continue

        if name not in cache:
            cache[name] = resolver.resolve(name)

        schema = cache[name]
        if schema is None:
            diagnostics.warning(
                "body-unresolved",
                f"{route.method} {route.path}: request body {name} left empty",
            )
            continue
        route.request_body = schema

    return routes
