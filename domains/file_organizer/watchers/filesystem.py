"""
File system watcher for the File Organizer domain.

Monitors one directory for created and modified files and delivers each
path to the event queue once things quiet down. Uses watchdog for
cross-platform file system event monitoring.

Repeated raw events for the same path are coalesced: every event restarts
that path's debounce timer, and a short settle delay after the window lowers
(without removing) the chance of handing over a file that is still being
written. The watcher never waits for the pipeline.
"""

import threading
import time
from pathlib import Path
from typing import Callable, Dict, Optional

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from autofile.utils.helpers import normalise_path, should_ignore_path


class DebouncedFileHandler(FileSystemEventHandler):
    """Coalesces file events per path and emits each path once."""

    def __init__(
        self,
        emit: Callable[[Path], None],
        debounce_seconds: float = 2.0,
        settle_delay: float = 0.5,
    ):
        """
        Initialize event handler.

        Args:
            emit: Called with the absolute path of each settled file
            debounce_seconds: Quiet period required before emitting
            settle_delay: Extra wait after the quiet period
        """
        super().__init__()
        self.emit = emit
        self.debounce_seconds = debounce_seconds
        self.settle_delay = settle_delay
        self._timers: Dict[Path, threading.Timer] = {}
        self._lock = threading.Lock()

    def should_process(self, event: FileSystemEvent) -> bool:
        """Files only; hidden and temporary download files are ignored."""
        if event.is_directory:
            return False
        return not should_ignore_path(Path(str(event.src_path)))

    def schedule(self, path: Path) -> None:
        """(Re)start the debounce timer for ``path``."""
        path = normalise_path(path)
        with self._lock:
            previous = self._timers.pop(path, None)
            if previous is not None:
                previous.cancel()
            timer = threading.Timer(self.debounce_seconds, self._fire, args=(path,))
            timer.daemon = True
            self._timers[path] = timer
            timer.start()

    def _fire(self, path: Path) -> None:
        with self._lock:
            timer = self._timers.get(path)
            if timer is not threading.current_thread():
                return  # superseded by a newer event
            del self._timers[path]

        if self.settle_delay > 0:
            time.sleep(self.settle_delay)

        if not path.is_file():
            logger.debug(f"Path vanished before delivery: {path}")
            return

        logger.info(f"New file detected: {path}")
        try:
            self.emit(path)
        except Exception as e:
            logger.error(f"Failed to deliver file path {path}: {e}")

    def cancel_pending(self) -> None:
        """Drop every pending notification."""
        with self._lock:
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()

    def pending(self) -> int:
        with self._lock:
            return len(self._timers)

    def on_created(self, event: FileSystemEvent):
        """Handle file creation."""
        if self.should_process(event):
            self.schedule(Path(str(event.src_path)))

    def on_modified(self, event: FileSystemEvent):
        """Handle file modification."""
        if self.should_process(event):
            self.schedule(Path(str(event.src_path)))

    def on_moved(self, event: FileSystemEvent):
        """Handle rename into the watched directory (e.g. finished downloads)."""
        dest = getattr(event, "dest_path", None)
        if event.is_directory or not dest:
            return
        dest_path = Path(str(dest))
        if not should_ignore_path(dest_path):
            self.schedule(dest_path)


class FileSystemWatcher:
    """Watches one directory and feeds settled file paths to a callback."""

    def __init__(
        self,
        watch_dir: Path,
        emit: Callable[[Path], None],
        debounce_seconds: float = 2.0,
        settle_delay: float = 0.5,
        observer: Optional[Observer] = None,
    ):
        """
        Initialize file system watcher.

        Args:
            watch_dir: Directory to monitor (non-recursive)
            emit: Receives each settled file path
            debounce_seconds: Coalescing window
            settle_delay: Delay before delivery
            observer: watchdog observer (a fresh Observer by default)
        """
        self.watch_dir = normalise_path(Path(watch_dir))
        self.event_handler = DebouncedFileHandler(emit, debounce_seconds, settle_delay)
        self.observer = observer or Observer()

        logger.info("File system watcher initialized")
        logger.info(f"Watching directory: {self.watch_dir}")

    def start_watching(self):
        """Start watching the configured directory."""
        self.observer.schedule(self.event_handler, str(self.watch_dir), recursive=False)
        self.observer.start()
        logger.success("File system observer started")

    def stop_watching(self):
        """Stop watching and drop pending notifications."""
        self.observer.stop()
        self.observer.join()
        self.event_handler.cancel_pending()
        logger.info("File system observer stopped")
