from collections import Counter
from pathlib import Path
import textwrap

import pytest

from gobru.diagnostics import Diagnostics
from gobru.extractors.go.lexer import GoParseError
from gobru.orchestrator.pipeline import collect_routes
from gobru.repo.source_tree import GoSourceTree
from gobru.resolve.discover import discover_routes
from gobru.resolve.schema import TypeSchemaResolver


def write(p: Path, s: str) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(textwrap.dedent(s), encoding="utf-8")


class CountingResolver:
    def __init__(self, inner):
        self.inner = inner
        self.calls = Counter()

    def resolve(self, type_name):
        self.calls[type_name] += 1
        return self.inner.resolve(type_name)


TYPES_SRC = """
package checks

type IssueCheckRequest struct {
    Amount string `json:"Amount__c"`
    Memo   string `json:"Memo__c,omitempty"`
}
"""


def counting_collect(repo: Path):
    diagnostics = Diagnostics()
    tree = GoSourceTree.scan(repo)
    resolver = CountingResolver(TypeSchemaResolver(tree, diagnostics))
    result = collect_routes(repo, diagnostics, resolver=resolver)
    return result, resolver, diagnostics


def test_issue_check_scenario(tmp_path: Path):
    write(tmp_path / "types.go", TYPES_SRC)
    write(
        tmp_path / "handlers.go",
        """
        package checks

        // @route POST /checks/issue
        // @body IssueCheckRequest
        func IssueCheck(w http.ResponseWriter, r *http.Request) {}
        """,
    )
    result, resolver, _ = counting_collect(tmp_path)

    assert len(result.routes) == 1
    route = result.routes[0]
    assert route.method == "POST"
    assert route.path == "/checks/issue"
    assert route.handler_name == "IssueCheck"
    assert route.file_path == "handlers.go"

    body = route.request_body
    assert body is not None
    assert [(f.wire_name, f.required) for f in body.fields] == [
        ("Amount__c", False),
        ("Memo__c", False),
    ]
    assert resolver.calls == Counter({"IssueCheckRequest": 1})


def test_route_without_body_never_calls_resolver(tmp_path: Path):
    write(tmp_path / "types.go", TYPES_SRC)
    write(
        tmp_path / "handlers.go",
        """
        package checks

        // @route POST /checks/issue
        func IssueCheck() {}
        """,
    )
    result, resolver, _ = counting_collect(tmp_path)

    assert len(result.routes) == 1
    assert result.routes[0].request_body is None
    assert result.routes[0].body_type_name == ""
    assert sum(resolver.calls.values()) == 0


def test_shared_body_type_resolved_once(tmp_path: Path):
    write(tmp_path / "types.go", "package api\n\ntype TypeX struct {\n    Name string\n}\n")
    write(
        tmp_path / "handlers.go",
        """
        package api

        // @route POST /x
        // @body TypeX
        func CreateX() {}

        // @route PUT /x/:id
        // @body TypeX
        func UpdateX() {}

        // @route PATCH /x/:id
        // @body Missing
        func PatchX() {}

        // @route DELETE /x/:id
        // @body Missing
        func DeleteX() {}
        """,
    )
    result, resolver, diagnostics = counting_collect(tmp_path)

    assert resolver.calls == Counter({"TypeX": 1, "Missing": 1})
    create, update, patch, delete = result.routes
    assert create.request_body is not None
    assert create.request_body == update.request_body
    assert create.request_body.model_dump() == update.request_body.model_dump()

    # not-found is cached too, and never fatal
    assert patch.request_body is None
    assert delete.request_body is None
    assert len(diagnostics.by_code("type-not-found")) == 1


def test_discovery_order_follows_sorted_paths_then_source(tmp_path: Path):
    write(
        tmp_path / "z" / "last.go",
        """
        package z

        // @route GET /z
        func Z() {}
        """,
    )
    write(
        tmp_path / "a.go",
        """
        package main

        // @route GET /b
        func B() {}

        // plain helper, no annotations
        func helper() {}

        // @route GET /a
        func A() {}
        """,
    )
    diagnostics = Diagnostics()
    routes = discover_routes(GoSourceTree.scan(tmp_path), diagnostics)

    assert [(r.path, r.handler_name) for r in routes] == [("/b", "B"), ("/a", "A"), ("/z", "Z")]
    assert len(diagnostics.by_code("route-found")) == 3


def test_method_handlers_and_names(tmp_path: Path):
    write(
        tmp_path / "server.go",
        """
        package server

        // Health reports liveness.
        // @name Health check
        // @route GET /health
        // @description Returns 200 when
        //   the process is up.
        func (s *Server) Health(w http.ResponseWriter, r *http.Request) {}
        """,
    )
    result = collect_routes(tmp_path, Diagnostics())

    route = result.routes[0]
    assert route.handler_name == "Health"
    assert route.name == "Health check"
    assert route.display_name == "Health check"
    assert route.description == "Returns 200 when the process is up."


def test_malformed_file_aborts_collection(tmp_path: Path):
    write(
        tmp_path / "ok.go",
        """
        package main

        // @route GET /ok
        func Ok() {}
        """,
    )
    write(tmp_path / "zz_broken.go", "package main\n\nfunc Broken() {\n")

    with pytest.raises(GoParseError) as exc:
        collect_routes(tmp_path, Diagnostics())
    assert exc.value.path == "zz_broken.go"
