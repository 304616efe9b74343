"""
Event queue and pipeline worker for the File Organizer domain.

The watcher puts paths on one ordered queue; a single worker thread drains
it and runs the pipeline sequentially. Running one file at a time also
keeps at most one embedding request in flight.
"""

import queue
import threading
from pathlib import Path
from typing import Literal, Optional

from loguru import logger

from domains.file_organizer.pipeline import OrganizationPipeline

OverflowPolicy = Literal["block", "drop_oldest"]

_STOP = object()


class FileEventQueue:
    """
    Ordered path queue between the watcher and the worker.

    ``max_size`` of 0 means unbounded. When bounded and full, ``block`` makes
    the producer wait and ``drop_oldest`` discards the oldest queued path.
    """

    def __init__(self, max_size: int = 0, overflow_policy: OverflowPolicy = "block"):
        if overflow_policy not in ("block", "drop_oldest"):
            raise ValueError(f"Unknown overflow policy: {overflow_policy}")
        self.max_size = max_size
        self.overflow_policy = overflow_policy
        self.dropped = 0
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=max_size)
        self._put_lock = threading.Lock()

    def put(self, path: Path) -> None:
        """Enqueue ``path`` according to the overflow policy."""
        if self.overflow_policy == "block":
            self._queue.put(path)
            return

        with self._put_lock:
            while True:
                try:
                    self._queue.put_nowait(path)
                    return
                except queue.Full:
                    pass
                try:
                    oldest = self._queue.get_nowait()
                except queue.Empty:
                    continue
                self._queue.task_done()
                self.dropped += 1
                logger.warning(f"Event queue full ({self.max_size}), dropped oldest path: {oldest}")

    def get(self, timeout: Optional[float] = None) -> object:
        """Dequeue the next item (a path or the stop marker)."""
        return self._queue.get(timeout=timeout)

    def task_done(self) -> None:
        self._queue.task_done()

    def join(self) -> None:
        """Block until every queued path has been processed."""
        self._queue.join()

    def close(self) -> None:
        """Ask the consumer to stop after the items already queued."""
        self._queue.put(_STOP)

    def qsize(self) -> int:
        return self._queue.qsize()


class OrganizerWorker(threading.Thread):
    """Dedicated thread running the pipeline for each queued path."""

    def __init__(self, events: FileEventQueue, pipeline: OrganizationPipeline):
        super().__init__(name="organizer-worker", daemon=True)
        self.events = events
        self.pipeline = pipeline
        self.processed = 0
        self.failed = 0

    def run(self) -> None:
        logger.info("Organizer worker started")
        while True:
            item = self.events.get()
            try:
                if item is _STOP:
                    break
                result = self.pipeline.process(Path(item))
                self.processed += 1
                if result is None:
                    self.failed += 1
                logger.debug(f"Queue size: {self.events.qsize()}")
            finally:
                self.events.task_done()
        logger.info(f"Organizer worker stopped ({self.processed} processed, {self.failed} failed)")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop after the file in flight and anything already queued."""
        self.events.close()
        self.join(timeout)
