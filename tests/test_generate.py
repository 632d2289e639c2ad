from pathlib import Path
import textwrap

import pytest

from gobru.config import GenerateConfig
from gobru.diagnostics import Diagnostics
from gobru.extractors.go.lexer import GoParseError
from gobru.orchestrator.pipeline import run_generate


def write(p: Path, s: str) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(textwrap.dedent(s), encoding="utf-8")


def make_repo(root: Path) -> Path:
    repo = root / "checks-api"
    write(
        repo / "types.go",
        """
        package checks

        type IssueCheckRequest struct {
            // Amount in dollars.
            Amount  string `json:"Amount__c" binding:"required"`
            Memo    string `json:"Memo__c,omitempty"`
            Copies  int    `json:"copies"`
            Express bool   `json:"express"`
        }
        """,
    )
    write(
        repo / "handlers.go",
        """
        package checks

        // IssueCheck issues a check.
        //
        // @route POST /checks/issue
        // @body IssueCheckRequest
        // @description Issues a paper check
        //   for the signed-in account.
        func IssueCheck(w http.ResponseWriter, r *http.Request) {}

        // @route GET /checks/:id
        func GetCheck(w http.ResponseWriter, r *http.Request) {}

        // @route PUT /checks/:id
        // @body NotInThisTree
        func ReplaceCheck(w http.ResponseWriter, r *http.Request) {}
        """,
    )
    return repo


def test_generate_writes_one_file_per_route(tmp_path: Path):
    repo = make_repo(tmp_path)
    out = tmp_path / "bruno"

    result = run_generate(GenerateConfig(input_dir=repo, output_dir=out))

    assert result.files_scanned == 2
    assert [(d.method, d.url) for d in result.descriptors] == [
        ("POST", "{{baseUrl}}/checks/issue"),
        ("GET", "{{baseUrl}}/checks/:id"),
        ("PUT", "{{baseUrl}}/checks/:id"),
    ]
    assert sorted(Path(p).name for p in result.written) == [
        "get__checks__id.bru",
        "post__checks_issue.bru",
        "put__checks__id.bru",
    ]
    assert result.failed == []
    assert (out / "bruno.json").exists()

    issue = (out / "post__checks_issue.bru").read_text(encoding="utf-8")
    assert "post {" in issue
    assert "url: {{baseUrl}}/checks/issue" in issue
    assert '"Amount__c": ""' in issue
    assert '"copies": 0' in issue
    assert '"express": false' in issue
    assert "Issues a paper check for the signed-in account." in issue
    assert "seq: 1" in issue

    # unresolved body: route still emitted, without a body block
    replace = (out / "put__checks__id.bru").read_text(encoding="utf-8")
    assert "body:json" not in replace
    assert result.routes[2].request_body is None
    assert result.diagnostics.by_code("type-not-found")


def test_generate_is_idempotent(tmp_path: Path):
    repo = make_repo(tmp_path)

    r1 = run_generate(GenerateConfig(input_dir=repo, output_dir=tmp_path / "out1"))
    r2 = run_generate(GenerateConfig(input_dir=repo, output_dir=tmp_path / "out2"))

    assert [d.model_dump() for d in r1.descriptors] == [d.model_dump() for d in r2.descriptors]
    for p1, p2 in zip(r1.written, r2.written):
        assert Path(p1).name == Path(p2).name
        assert Path(p1).read_bytes() == Path(p2).read_bytes()


def test_dry_run_writes_nothing(tmp_path: Path):
    repo = make_repo(tmp_path)
    out = tmp_path / "out"

    result = run_generate(GenerateConfig(input_dir=repo, output_dir=out, dry_run=True))

    assert len(result.descriptors) == 3
    assert result.written == []
    assert not out.exists()


def test_parse_error_aborts_before_writing(tmp_path: Path):
    repo = make_repo(tmp_path)
    write(repo / "broken.go", "package checks\n\nfunc Broken( {\n")
    out = tmp_path / "out"

    with pytest.raises(GoParseError):
        run_generate(GenerateConfig(input_dir=repo, output_dir=out))
    assert not out.exists()


def test_render_failure_skips_only_that_route(tmp_path: Path):
    repo = make_repo(tmp_path)
    out = tmp_path / "out"
    # a directory squatting on the target file name makes that one write fail
    (out / "get__checks__id.bru").mkdir(parents=True)

    diagnostics = Diagnostics()
    result = run_generate(GenerateConfig(input_dir=repo, output_dir=out), diagnostics)

    assert result.failed == ["GET /checks/:id"]
    assert len(result.written) == 2
    assert len(diagnostics.by_code("render-failed")) == 1


def test_config_rejects_non_positive_max_files(tmp_path: Path):
    with pytest.raises(ValueError):
        GenerateConfig(input_dir=tmp_path, max_files=0)


def test_collection_name_defaults_to_input_dir_name(tmp_path: Path):
    repo = make_repo(tmp_path)
    assert GenerateConfig(input_dir=repo).resolved_collection_name == "checks-api"
