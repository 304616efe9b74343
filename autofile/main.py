"""
AutoFile - Smart File Organizer

Watches a directory (Downloads by default) and moves every new file into a
category destination, picking the best matching existing subfolder by
comparing text embeddings of the file and folder names.
"""

from __future__ import annotations

import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import ValidationError
from pydantic_settings import SettingsError

from autofile.models.exceptions import AutoFileError, ConfigurationError
from autofile.utils.config import Settings, get_default_watch_dir, get_home_dir, get_settings
from autofile.utils.embedding import EmbeddingClient
from autofile.utils.helpers import normalise_path
from autofile.utils.log_setup import configure_logging
from domains.file_organizer.mover import ConflictSafeMover
from domains.file_organizer.pipeline import OrganizationPipeline
from domains.file_organizer.preprocessors import PreprocessorChain
from domains.file_organizer.resolver import SubfolderResolver
from domains.file_organizer.rules import DestinationRuleTable
from domains.file_organizer.similarity import SimilarityEngine
from domains.file_organizer.watchers.filesystem import FileSystemWatcher
from domains.file_organizer.worker import FileEventQueue, OrganizerWorker


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""

    parser = argparse.ArgumentParser(
        prog="autofile",
        description="Watch a directory and organize new files into semantic destinations.",
    )
    parser.add_argument(
        "watch_dir",
        nargs="?",
        type=Path,
        default=None,
        help="Directory to monitor (default: WATCH_DIR setting, else ~/Downloads).",
    )
    return parser.parse_args(argv)


def resolve_watch_dir(argument: Optional[Path], settings: Settings) -> Path:
    """
    Pick and validate the directory to watch.

    Raises:
        ConfigurationError: if the directory is missing or not a directory
    """
    if argument is not None:
        candidate = argument
    elif settings.watch_dir is not None:
        candidate = settings.watch_dir
    else:
        candidate = get_default_watch_dir()

    candidate = normalise_path(candidate)
    if not candidate.is_dir():
        raise ConfigurationError(f"Provided path is not a valid directory: {candidate}", path=candidate)
    return candidate


def build_pipeline(settings: Settings, engine: SimilarityEngine, home: Optional[Path] = None) -> OrganizationPipeline:
    """
    Assemble the organization pipeline.

    Creates every destination directory; failures are fatal. Each rule's
    destination is reserved so another category never descends into it.
    """
    rules = DestinationRuleTable.with_defaults(home or get_home_dir(), settings.category_destinations)
    rules.ensure_destinations_exist()

    resolver = SubfolderResolver(
        engine,
        excluded_folders=settings.get_excluded_folders(),
        threshold=settings.similarity_threshold,
        reserved_dirs=[rule.destination for rule in rules.rules.values()],
    )
    preprocessors = PreprocessorChain.from_names(settings.get_enabled_preprocessors())

    return OrganizationPipeline(
        rules=rules,
        resolver=resolver,
        mover=ConflictSafeMover(),
        preprocessors=preprocessors,
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the CLI."""

    args = parse_args(argv)
    try:
        settings = get_settings()
    except (ValidationError, SettingsError) as e:
        logger.error(f"Startup failed: invalid configuration: {e}")
        return 1
    configure_logging(settings)

    logger.info("Starting AutoFile - Smart File Organizer")

    client: Optional[EmbeddingClient] = None
    engine: Optional[SimilarityEngine] = None
    try:
        watch_dir = resolve_watch_dir(args.watch_dir, settings)
        logger.info(f"Monitoring directory: {watch_dir}")

        logger.info("Initializing semantic matcher...")
        client = EmbeddingClient(settings)
        client.warm_up()
        engine = SimilarityEngine(client)
        logger.info("Semantic matcher initialized")

        pipeline = build_pipeline(settings, engine)
    except AutoFileError as e:
        logger.error(f"Startup failed: {e}")
        if engine is not None:
            engine.close()
        if client is not None:
            client.close()
        return 1

    events = FileEventQueue(settings.queue_max_size, settings.queue_overflow_policy)
    worker = OrganizerWorker(events, pipeline)
    watcher = FileSystemWatcher(
        watch_dir,
        events.put,
        debounce_seconds=settings.debounce_seconds,
        settle_delay=settings.settle_delay_ms / 1000,
    )

    stop_event = threading.Event()

    def _signal_handler(signum, frame):  # noqa: D401
        logger.info(f"Received signal {signum}, shutting down.")
        stop_event.set()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    worker.start()
    try:
        watcher.start_watching()
        while not stop_event.is_set():
            stop_event.wait(1.0)
    finally:
        if watcher.observer.is_alive():
            watcher.stop_watching()
        worker.stop()
        engine.close()
        client.close()

    logger.info("AutoFile stopped.")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
