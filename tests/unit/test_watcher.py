import threading
import time
from pathlib import Path

import pytest

from autofile.utils.helpers import normalise_path
from domains.file_organizer.watchers.filesystem import DebouncedFileHandler


class Event:
    def __init__(self, src: Path, dest: Path | None = None, is_directory: bool = False):
        self.src_path = str(src)
        self.dest_path = str(dest) if dest else ""
        self.is_directory = is_directory


class Collector:
    def __init__(self):
        self.paths = []
        self.delivered = threading.Event()

    def __call__(self, path):
        self.paths.append(path)
        self.delivered.set()


@pytest.fixture
def collector():
    return Collector()


@pytest.fixture
def handler(collector):
    handler = DebouncedFileHandler(collector, debounce_seconds=0.1, settle_delay=0.0)
    yield handler
    handler.cancel_pending()


def _wait_idle(handler, timeout=3.0):
    deadline = time.monotonic() + timeout
    while handler.pending() and time.monotonic() < deadline:
        time.sleep(0.02)
    time.sleep(0.05)


def test_repeated_events_are_coalesced(handler, collector, tmp_path):
    path = tmp_path / "report.pdf"
    path.write_bytes(b"%PDF")

    handler.on_created(Event(path))
    for _ in range(5):
        handler.on_modified(Event(path))
        time.sleep(0.01)
    _wait_idle(handler)

    assert collector.paths == [normalise_path(path)]


def test_distinct_paths_each_emitted(handler, collector, tmp_path):
    first, second = tmp_path / "a.txt", tmp_path / "b.txt"
    first.write_text("a")
    second.write_text("b")

    handler.on_created(Event(first))
    handler.on_created(Event(second))
    _wait_idle(handler)

    assert sorted(collector.paths) == sorted([normalise_path(first), normalise_path(second)])


@pytest.mark.parametrize("name", [".hidden", "movie.mkv.crdownload", "video.part", "notes.txt~"])
def test_hidden_and_temporary_files_ignored(handler, collector, tmp_path, name):
    path = tmp_path / name
    path.write_text("x")

    handler.on_created(Event(path))

    assert handler.pending() == 0
    assert collector.paths == []


def test_directories_ignored(handler, collector, tmp_path):
    folder = tmp_path / "folder"
    folder.mkdir()

    handler.on_created(Event(folder, is_directory=True))

    assert handler.pending() == 0


def test_completed_download_rename_is_emitted(handler, collector, tmp_path):
    final = tmp_path / "movie.mkv"
    final.write_bytes(b"\x1a\x45\xdf\xa3")

    handler.on_moved(Event(tmp_path / "movie.mkv.crdownload", dest=final))
    assert collector.delivered.wait(3)

    assert collector.paths == [normalise_path(final)]


def test_vanished_file_not_emitted(handler, collector, tmp_path):
    path = tmp_path / "flash.txt"
    path.write_text("x")

    handler.on_created(Event(path))
    path.unlink()
    _wait_idle(handler)

    assert collector.paths == []


def test_settle_delay_applied(collector, tmp_path):
    handler = DebouncedFileHandler(collector, debounce_seconds=0.05, settle_delay=0.3)
    path = tmp_path / "slow.txt"
    path.write_text("x")

    started = time.monotonic()
    handler.on_created(Event(path))
    assert collector.delivered.wait(3)

    assert time.monotonic() - started >= 0.3
