"""
Leveled run log.

Collects the ``debug`` / ``info`` / ``error`` lines shown in a run's log
panel, filtered by the configured level, and mirrors every line to the
standard ``logging`` module.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

LOG_LEVELS = ("debug", "info", "error")

_STD_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "error": logging.ERROR,
}


@dataclass
class LogEntry:
    level: str
    message: str

    def __str__(self) -> str:
        return f"[{self.level.upper()}] {self.message}"


@dataclass
class RunLog:
    """Log panel for one simulation run."""

    level: str = "info"
    entries: list[LogEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.level not in LOG_LEVELS:
            raise ValueError(
                f"Unknown log level '{self.level}', expected one of {LOG_LEVELS}"
            )

    def accepts(self, level: str) -> bool:
        """Errors always pass; debug lines only at the debug level."""
        if level == "error":
            return True
        if self.level == "debug":
            return True
        return self.level == "info" and level == "info"

    def add(self, message: str, level: str = "info") -> None:
        logger.log(_STD_LEVELS.get(level, logging.INFO), message)
        if self.accepts(level):
            self.entries.append(LogEntry(level=level, message=message))

    def debug(self, message: str) -> None:
        self.add(message, "debug")

    def info(self, message: str) -> None:
        self.add(message, "info")

    def error(self, message: str) -> None:
        self.add(message, "error")

    def clear(self) -> None:
        self.entries.clear()

    def lines(self) -> list[str]:
        return [str(e) for e in self.entries]
