"""Progress reporting for documentation runs.

A reporter receives textual status updates while a run is in progress and
the per-model usage table at the end. Reporting is best effort: a reporter
that raises is logged and ignored, never allowed to stop the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Protocol

from rich.console import Console
from rich.status import Status as RichStatus

from treedoc.cli.formatting.report import print_estimate, print_model_details
from treedoc.llm.registry import ModelRecord

logger = logging.getLogger(__name__)


class Status(Enum):
    """Status enum for progress reporting."""
    RUNNING = "running"
    SUCCESS = "success"
    COMPLETE = "complete"


@dataclass
class ProgressEvent:
    """Progress event for reporting."""
    status: Status
    message: str = ""
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()


class Reporter(Protocol):
    def update(self, message: str) -> None: ...

    def succeed(self, message: str) -> None: ...

    def stop(self) -> None: ...

    def report(self, models: List[ModelRecord]) -> None: ...


class ProgressReporter:
    """In-memory reporter; keeps every event and the final usage rows."""

    def __init__(self):
        self._events: list[ProgressEvent] = []
        self.reported: Optional[List[ModelRecord]] = None

    def update(self, message: str) -> None:
        self._events.append(ProgressEvent(Status.RUNNING, message))

    def succeed(self, message: str) -> None:
        self._events.append(ProgressEvent(Status.SUCCESS, message))

    def stop(self) -> None:
        self._events.append(ProgressEvent(Status.COMPLETE))

    def report(self, models: List[ModelRecord]) -> None:
        self.reported = list(models)

    def get_events(self) -> list[ProgressEvent]:
        """Get all events."""
        return self._events

    def messages(self, status: Optional[Status] = None) -> list[str]:
        return [e.message for e in self._events if status is None or e.status == status]


class ConsoleProgress:
    """Spinner on a rich console; ``succeed`` leaves a check-marked line behind."""

    def __init__(self, console: Optional[Console] = None, estimate: bool = False):
        self.console = console or Console(stderr=True)
        self.estimate = estimate
        self._status: Optional[RichStatus] = None

    def update(self, message: str) -> None:
        if self._status is None:
            self._status = self.console.status(message, spinner="dots")
            self._status.start()
        else:
            self._status.update(message)

    def succeed(self, message: str) -> None:
        self.stop()
        self.console.print(f"[green]✔[/green] {message}")

    def stop(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None

    def report(self, models: List[ModelRecord]) -> None:
        if self.estimate:
            print_estimate(models, self.console)
        else:
            print_model_details(models, self.console)


class SafeReporter:
    """Wraps a reporter so that its failures are logged, not raised."""

    def __init__(self, inner: Reporter):
        self._inner = inner

    def _call(self, method: str, *args) -> None:
        try:
            getattr(self._inner, method)(*args)
        except Exception as e:
            logger.warning("Progress reporter %s failed: %s", method, e)

    def update(self, message: str) -> None:
        self._call("update", message)

    def succeed(self, message: str) -> None:
        self._call("succeed", message)

    def stop(self) -> None:
        self._call("stop")

    def report(self, models: List[ModelRecord]) -> None:
        self._call("report", models)
