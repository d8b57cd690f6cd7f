import logging
from typing import Protocol, TypeVar

from composeapp.domain.shared.event import ProgressEvent

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=ProgressEvent)


class ProgressReporter(Protocol):
    """Sink for progress events."""

    def emit(self, event: ProgressEvent) -> None: ...


class LoggingProgressReporter:
    """Default reporter: writes each event to the log as structured key/values."""

    def emit(self, event: ProgressEvent) -> None:
        logger.info("%s %s", event.kind, event.model_dump(exclude={"kind"}, mode="json"))


class RecordingProgressReporter:
    """Keeps every emitted event in memory."""

    def __init__(self) -> None:
        self.events: list[ProgressEvent] = []

    def emit(self, event: ProgressEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: type[E]) -> list[E]:
        return [e for e in self.events if isinstance(e, event_type)]
