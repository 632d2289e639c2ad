from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

Level = Literal["debug", "info", "warning", "error"]

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass(frozen=True)
class Diagnostic:
    level: Level
    code: str  # route-found, type-not-found, duplicate-type, ...
    message: str


@dataclass
class Diagnostics:
    """
    Per-run diagnostics sink, passed explicitly into every pipeline stage.

    Each message goes to the `gobru` logger and is also kept as a structured
    Diagnostic so callers (CLI summary, tests) can inspect what happened.
    """

    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("gobru"))
    records: list[Diagnostic] = field(default_factory=list)

    def emit(self, level: Level, code: str, message: str) -> None:
        self.records.append(Diagnostic(level=level, code=code, message=message))
        self.logger.log(_LEVELS[level], "%s: %s", code, message)

    def debug(self, code: str, message: str) -> None:
        self.emit("debug", code, message)

    def info(self, code: str, message: str) -> None:
        self.emit("info", code, message)

    def warning(self, code: str, message: str) -> None:
        self.emit("warning", code, message)

    def error(self, code: str, message: str) -> None:
        self.emit("error", code, message)

    def by_code(self, code: str) -> list[Diagnostic]:
        return [d for d in self.records if d.code == code]

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.records if d.level in ("warning", "error"))
