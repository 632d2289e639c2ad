from __future__ import annotations

from pathlib import Path
from typing import Optional

import pathspec

DEFAULT_IGNORES = {
    ".git",
    ".hg",
    ".svn",
    ".idea",
    ".vscode",
    "node_modules",
    ".gobru",
}


def should_ignore_dir(dir_path: Path) -> bool:
    return dir_path.name in DEFAULT_IGNORES


def load_gitignore(root: Path) -> Optional[pathspec.PathSpec]:
    """PathSpec for `<root>/.gitignore`, or None when the repo has none."""
    gitignore = root / ".gitignore"
    if not gitignore.is_file():
        return None
    lines = gitignore.read_text(encoding="utf-8", errors="replace").splitlines()
    return pathspec.GitIgnoreSpec.from_lines(lines)
