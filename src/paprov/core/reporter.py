"""
Verbosity-controlled reporting of run progress.

Analysis code hands structured events to a ``Reporter`` and never looks at
the verbosity level itself. The reporter records every event and echoes
those whose level does not exceed the configured verbosity:

    0  silent (fatal errors only)
    1  begin and end of a run, warnings
    2  progress log
    3  progress and results summary
    5  full report
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import click

logger = logging.getLogger(__name__)

DEFAULT_VERBOSITY = 2
MAX_VERBOSITY = 5


class EventKind(Enum):
    """Kinds of report events."""
    START = "start"
    COMPLETE = "complete"
    PROGRESS = "progress"
    WARNING = "warning"
    SUMMARY = "summary"


# Styling mirrors the CLI echo helpers
_STYLES = {
    EventKind.START: ("", "blue"),
    EventKind.COMPLETE: ("✓ ", "green"),
    EventKind.PROGRESS: ("→ ", "blue"),
    EventKind.WARNING: ("! ", "yellow"),
    EventKind.SUMMARY: ("  ", "cyan"),
}

_LOG_LEVELS = {
    EventKind.WARNING: logging.WARNING,
    EventKind.SUMMARY: logging.DEBUG,
}


@dataclass(frozen=True)
class ReportEvent:
    """A single progress or summary record."""
    kind: EventKind
    message: str
    level: int = DEFAULT_VERBOSITY
    data: Dict[str, Any] = field(default_factory=dict)


def resolve_verbosity(verbosity: Any) -> tuple[int, Optional[str]]:
    """
    Validate a verbosity level.

    Returns:
        (level, warning) where warning is None if no correction was needed
    """
    try:
        value = int(verbosity)
    except (TypeError, ValueError):
        value = -1
    if value < 0 or value > MAX_VERBOSITY or value != verbosity:
        return DEFAULT_VERBOSITY, (
            "Parameter 'verbosity' must be an integer between 0 [silent] and "
            f"{MAX_VERBOSITY} [full report], set to {DEFAULT_VERBOSITY}"
        )
    return value, None


class Reporter:
    """
    Collects report events and echoes them according to verbosity.

    Usage:
        reporter = Reporter(verbosity=3)
        reporter.start("report-pa")
        reporter.progress("Retaining 4 populations")
        reporter.complete("report-pa")
    """

    def __init__(self, verbosity: int = DEFAULT_VERBOSITY, echo: bool = True):
        self.events: List[ReportEvent] = []
        self.echo = echo
        self.verbosity, correction = resolve_verbosity(verbosity)
        if correction:
            self.warning(correction)

    def emit(self, event: ReportEvent) -> None:
        self.events.append(event)
        logger.log(_LOG_LEVELS.get(event.kind, logging.INFO), event.message)
        if self.echo and event.level <= self.verbosity:
            prefix, colour = _STYLES[event.kind]
            click.echo(
                click.style(prefix, fg=colour) + event.message,
                err=event.kind is EventKind.WARNING,
            )

    def start(self, name: str) -> None:
        self.emit(ReportEvent(EventKind.START, f"Starting {name}", level=1))

    def complete(self, name: str) -> None:
        self.emit(ReportEvent(EventKind.COMPLETE, f"Completed: {name}", level=1))

    def progress(self, message: str, level: int = 2, **data: Any) -> None:
        self.emit(ReportEvent(EventKind.PROGRESS, message, level=level, data=data))

    def warning(self, message: str, level: int = 1, **data: Any) -> None:
        self.emit(ReportEvent(EventKind.WARNING, message, level=level, data=data))

    def summary(self, message: str, level: int = 3, **data: Any) -> None:
        self.emit(ReportEvent(EventKind.SUMMARY, message, level=level, data=data))

    def warnings(self) -> List[str]:
        """Messages of all warning events recorded so far."""
        return [e.message for e in self.events if e.kind is EventKind.WARNING]


class NullReporter(Reporter):
    """Reporter that records events but never echoes them."""

    def __init__(self, verbosity: int = DEFAULT_VERBOSITY):
        super().__init__(verbosity=verbosity, echo=False)
