"""Typed progress events and a synchronous publish/subscribe bus."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from pdfprep.logging_config import get_logger

logger = get_logger(__name__)


class ProgressEventType(str, Enum):
    """Kinds of progress events."""

    LOAD_START = "loadStart"
    LOAD_PROGRESS = "loadProgress"
    LOAD_COMPLETE = "loadComplete"
    LOAD_ERROR = "loadError"
    EXPORT_START = "exportStart"
    EXPORT_PROGRESS = "exportProgress"
    EXPORT_COMPLETE = "exportComplete"
    EXPORT_ERROR = "exportError"
    RENDER_START = "renderStart"
    RENDER_PROGRESS = "renderProgress"
    RENDER_COMPLETE = "renderComplete"


@dataclass(frozen=True)
class ProgressEvent:
    """A single progress notification.

    Attributes:
        type: What happened
        progress: Percent complete (0-100), when meaningful
        page_number: Page the event concerns, if any
        total_pages: Document page count, if known
        error: The failure for *Error events
        message: Short human-readable description
    """

    type: ProgressEventType
    progress: float | None = None
    page_number: int | None = None
    total_pages: int | None = None
    error: BaseException | None = None
    message: str | None = None


ProgressListener = Callable[[ProgressEvent], None]
Unsubscribe = Callable[[], None]


class ProgressBus:
    """Delivers events to listeners synchronously, in registration order.

    A listener that raises is logged and skipped; the remaining listeners
    still receive the event.

    Example:
        bus = ProgressBus()
        unsubscribe = bus.subscribe(print, ProgressEventType.LOAD_COMPLETE)
        bus.emit_load_complete(12)
        unsubscribe()
    """

    def __init__(self):
        self._subscriptions: list[tuple[ProgressListener, ProgressEventType | None]] = []

    def subscribe(
        self,
        listener: ProgressListener,
        event_type: ProgressEventType | None = None,
    ) -> Unsubscribe:
        """Register a listener for one event type, or for all when None.

        Returns:
            A callable that removes this subscription. Calling it twice is harmless.
        """
        entry = (listener, event_type)
        self._subscriptions.append(entry)

        def unsubscribe() -> None:
            for i, existing in enumerate(self._subscriptions):
                if existing is entry:
                    del self._subscriptions[i]
                    return

        return unsubscribe

    def emit(self, event: ProgressEvent) -> None:
        for listener, event_type in list(self._subscriptions):
            if event_type is not None and event_type != event.type:
                continue
            try:
                listener(event)
            except Exception:
                logger.exception("Progress listener failed on %s", event.type.value)

    def clear(self) -> None:
        self._subscriptions.clear()

    @property
    def listener_count(self) -> int:
        return len(self._subscriptions)

    # === Typed helpers ===

    def emit_load_start(self) -> None:
        self.emit(ProgressEvent(ProgressEventType.LOAD_START, progress=0))

    def emit_load_progress(self, progress: float, page_number: int | None = None, total_pages: int | None = None) -> None:
        self.emit(ProgressEvent(
            ProgressEventType.LOAD_PROGRESS,
            progress=progress,
            page_number=page_number,
            total_pages=total_pages,
        ))

    def emit_load_complete(self, total_pages: int) -> None:
        self.emit(ProgressEvent(ProgressEventType.LOAD_COMPLETE, progress=100, total_pages=total_pages))

    def emit_load_error(self, error: BaseException) -> None:
        self.emit(ProgressEvent(ProgressEventType.LOAD_ERROR, error=error, message=str(error)))

    def emit_export_start(self) -> None:
        self.emit(ProgressEvent(ProgressEventType.EXPORT_START, progress=0))

    def emit_export_progress(self, progress: float) -> None:
        self.emit(ProgressEvent(ProgressEventType.EXPORT_PROGRESS, progress=progress))

    def emit_export_complete(self) -> None:
        self.emit(ProgressEvent(ProgressEventType.EXPORT_COMPLETE, progress=100))

    def emit_export_error(self, error: BaseException) -> None:
        self.emit(ProgressEvent(ProgressEventType.EXPORT_ERROR, error=error, message=str(error)))

    def emit_render_start(self, page_number: int) -> None:
        self.emit(ProgressEvent(ProgressEventType.RENDER_START, page_number=page_number))

    def emit_render_progress(self, progress: float, page_number: int, total_pages: int) -> None:
        self.emit(ProgressEvent(
            ProgressEventType.RENDER_PROGRESS,
            progress=progress,
            page_number=page_number,
            total_pages=total_pages,
        ))

    def emit_render_complete(self, page_number: int) -> None:
        self.emit(ProgressEvent(ProgressEventType.RENDER_COMPLETE, progress=100, page_number=page_number))
