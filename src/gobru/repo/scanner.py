from __future__ import annotations

import os
from pathlib import Path

from gobru.repo.ignore import load_gitignore, should_ignore_dir


def scan_go_files(
    repo_path: Path,
    max_files: int | None = None,
    include_tests: bool = True,
) -> list[str]:
    """
    Return absolute paths (as strings) of .go files under repo_path.

    Ordered lexicographically by repo-relative POSIX path, so every run over the
    same tree visits files in the same order.
    """
    repo_path = repo_path.resolve()
    spec = load_gitignore(repo_path)

    found: list[tuple[str, str]] = []
    for root, dirs, files in _walk(repo_path):
        root_p = Path(root)

        # prune ignored dirs
        kept = []
        for d in dirs:
            if should_ignore_dir(root_p / d):
                continue
            if spec is not None and spec.match_file(_rel_posix(root_p / d, repo_path) + "/"):
                continue
            kept.append(d)
        dirs[:] = kept

        for f in files:
            if not f.endswith(".go"):
                continue
            if not include_tests and f.endswith("_test.go"):
                continue
            full = root_p / f
            rel = _rel_posix(full, repo_path)
            if spec is not None and spec.match_file(rel):
                continue
            found.append((rel, str(full)))

    found.sort(key=lambda x: x[0])
    out = [p for _, p in found]
    if max_files is not None:
        out = out[:max_files]
    return out


def relative_path(path: str | Path, repo_path: Path) -> str:
    return _rel_posix(Path(path), repo_path.resolve())


def _rel_posix(path: Path, repo_path: Path) -> str:
    return os.path.relpath(str(path), str(repo_path)).replace(os.sep, "/")


def _walk(repo_path: Path):
    # Separate helper to make unit testing easier (can be mocked)
    return os.walk(repo_path)
