"""Progress reporting side channel.

Resolvers report progress through a caller-supplied ``StatusReporter``
rather than ambient task state. ``LoggingStatusReporter`` is the default.
"""

from __future__ import annotations

from typing import Protocol

from rescache.observability.logging import get_logger


class StatusReporter(Protocol):
    def update_status(self, phase: str, message: str) -> None: ...


class LoggingStatusReporter:
    """Forwards status updates to structlog."""

    def __init__(self, component: str = "status") -> None:
        self._log = get_logger(component)

    def update_status(self, phase: str, message: str) -> None:
        self._log.info("status_update", phase=phase, status=message)


class RecordingStatusReporter:
    """Keeps ``(phase, message)`` pairs in memory, e.g. for operation history."""

    def __init__(self) -> None:
        self.history: list[tuple[str, str]] = []

    def update_status(self, phase: str, message: str) -> None:
        self.history.append((phase, message))


def default_reporter(reporter: StatusReporter | None) -> StatusReporter:
    return reporter if reporter is not None else LoggingStatusReporter()
