from __future__ import annotations

from pathlib import Path
from typing import Iterator

from gobru.extractors.go.decls import GoFile, parse_go_file
from gobru.repo.scanner import relative_path, scan_go_files


class GoSourceTree:
    """
    The Go files of one input directory, parsed lazily and at most once per run.

    Iteration order is the scanner's order (lexicographic relative path). A file
    that fails to parse raises GoParseError from whichever stage touches it first.
    """

    def __init__(self, root: Path, files: list[str]):
        self.root = root.resolve()
        self.files = list(files)
        self._parsed: dict[str, GoFile] = {}

    @classmethod
    def scan(cls, root: Path, max_files: int | None = None, include_tests: bool = True) -> "GoSourceTree":
        return cls(root, scan_go_files(root, max_files=max_files, include_tests=include_tests))

    def __len__(self) -> int:
        return len(self.files)

    def parse(self, path: str) -> GoFile:
        cached = self._parsed.get(path)
        if cached is None:
            cached = parse_go_file(Path(path), display_path=relative_path(path, self.root))
            self._parsed[path] = cached
        return cached

    def iter_parsed(self) -> Iterator[GoFile]:
        for p in self.files:
            yield self.parse(p)
