from __future__ import annotations

from gobru.diagnostics import Diagnostics
from gobru.domain.models import Route
from gobru.extractors.annotations import extract_annotations, has_route
from gobru.extractors.go.decls import FuncDecl, GoFile
from gobru.repo.source_tree import GoSourceTree


def route_from_func(fn: FuncDecl, file_path: str = "") -> Route | None:
    """Route stub for one func declaration, or None when it has no @route tag."""
    if not fn.doc:
        return None

    annotations = extract_annotations(fn.doc)
    if not has_route(annotations):
        return None

    return Route(
        method=annotations["route_method"],
        path=annotations["route_path"],
        handler_name=fn.name,
        name=annotations.get("name"),
        description=annotations.get("description", ""),
        body_type_name=annotations.get("body", ""),
        file_path=file_path,
        line=fn.line,
    )


def routes_from_file(go_file: GoFile) -> list[Route]:
    out: list[Route] = []
    for fn in go_file.funcs:
        route = route_from_func(fn, file_path=go_file.path)
        if route is not None:
            out.append(route)
    return out


def discover_routes(tree: GoSourceTree, diagnostics: Diagnostics) -> list[Route]:
    """
    Parse every file in the tree once and collect annotated handlers in traversal
    order. Parsing happens for all files, so a malformed file anywhere aborts
    discovery with GoParseError before any route is handed on.
    """
    routes: list[Route] = []
    for go_file in tree.iter_parsed():
        for route in routes_from_file(go_file):
            diagnostics.info(
                "route-found",
                f"{route.method} {route.path} in handler {route.handler_name} "
                f"({route.file_path}:{route.line})",
            )
            routes.append(route)
    return routes
