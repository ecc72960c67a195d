"""
Polygon change events and the analysis trigger

A PolygonSource emits discrete created/edited/deleted events; the
AnalysisTrigger turns them into pipeline runs (or result discards).
Runs execute on a bounded thread pool, so a newer edit can start while an
older run is still fetching footprints; the ResultRegister decides which
result is published.
"""

import queue
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_for_futures
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Protocol

from loguru import logger

from .pipeline import AnalysisPipeline


class PolygonEventKind(str, Enum):
    CREATED = "created"
    EDITED = "edited"
    DELETED = "deleted"


@dataclass(frozen=True)
class PolygonEvent:
    kind: PolygonEventKind
    polygon_id: str = "default"
    ring: List[List[float]] = field(default_factory=list)
    cell_size_m: Optional[int] = None


class PolygonSource(Protocol):
    """Anything that yields polygon change events until exhausted"""

    def events(self) -> Iterator[PolygonEvent]:
        ...


class QueuePolygonSource:
    """In-process event source backed by a queue"""

    _CLOSE = object()

    def __init__(self):
        self._queue: "queue.Queue" = queue.Queue()

    def emit(self, event: PolygonEvent) -> None:
        self._queue.put(event)

    def created(self, ring, polygon_id: str = "default", cell_size_m: Optional[int] = None) -> None:
        self.emit(PolygonEvent(PolygonEventKind.CREATED, polygon_id, [list(p) for p in ring], cell_size_m))

    def edited(self, ring, polygon_id: str = "default", cell_size_m: Optional[int] = None) -> None:
        self.emit(PolygonEvent(PolygonEventKind.EDITED, polygon_id, [list(p) for p in ring], cell_size_m))

    def deleted(self, polygon_id: str = "default") -> None:
        self.emit(PolygonEvent(PolygonEventKind.DELETED, polygon_id))

    def close(self) -> None:
        self._queue.put(self._CLOSE)

    def events(self) -> Iterator[PolygonEvent]:
        while True:
            item = self._queue.get()
            if item is self._CLOSE:
                return
            yield item


class AnalysisTrigger:
    """Consume polygon events and drive the analysis pipeline"""

    def __init__(self, pipeline: AnalysisPipeline, max_workers: int = 2):
        self.pipeline = pipeline
        self.register = pipeline.register
        self._executor = ThreadPoolExecutor(max_workers=max_workers)
        self._pending: List[Future] = []

    def handle(self, event: PolygonEvent) -> Optional[Future]:
        """Dispatch one event; returns the run future for created/edited events"""
        if event.kind == PolygonEventKind.DELETED:
            logger.info(f"Polygon {event.polygon_id} deleted, discarding its result")
            self.register.discard(event.polygon_id)
            return None

        # Versions follow event order, not worker scheduling order
        version = self.register.issue(event.polygon_id)
        logger.debug(f"Polygon {event.polygon_id} {event.kind.value}, scheduling analysis #{version}")
        future = self._executor.submit(
            self.pipeline.run, event.ring, event.cell_size_m, event.polygon_id, version
        )
        self._pending.append(future)
        return future

    def consume(self, source: PolygonSource) -> None:
        """Handle every event from source, then wait for outstanding runs"""
        for event in source.events():
            self.handle(event)
        self.wait()

    def wait(self) -> None:
        """Block until every scheduled run finishes; re-raise the first failure"""
        pending, self._pending = self._pending, []
        wait_for_futures(pending)
        errors = [f.exception() for f in pending if f.exception() is not None]
        for error in errors[1:]:
            logger.error(f"Analysis run failed: {error}")
        if errors:
            raise errors[0]

    def shutdown(self) -> None:
        self.wait()
        self._executor.shutdown(wait=True)
