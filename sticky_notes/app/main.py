import argparse
import asyncio
import signal
import sys
from pathlib import Path
from typing import Optional

from sticky_notes.cli import InteractiveShell
from sticky_notes.core import AsyncioScheduler, PlacementPolicy, ScreenBounds, detect_work_area, get_shutdown_coordinator
from sticky_notes.core.config_manager import get_config_manager
from sticky_notes.core.logging_config import configure_logging
from sticky_notes.core.logging_utils import get_module_logger
from sticky_notes.core.paths import APP_LOG_FILE, CONFIG_PATH, ensure_directories
from sticky_notes.notes import NotesCollection, NotesConfig, NoteStorage
from sticky_notes.notes.config import LOG_LEVELS

logger = get_module_logger("Main")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments; unset options fall back to config.txt."""
    parser = argparse.ArgumentParser(
        description="Sticky Notes - desktop notes with focus timers"
    )

    parser.add_argument(
        "--notes-file",
        type=Path,
        default=None,
        help="Path of the notes JSON file (default: ~/.sticky_notes/notes.json)"
    )

    parser.add_argument(
        "--log-level",
        choices=list(LOG_LEVELS),
        default=None,
        help="Logging level (default: info)"
    )

    parser.add_argument(
        "--console",
        dest="console_output",
        action="store_true",
        default=None,
        help="Also log to console"
    )

    parser.add_argument(
        "--no-console",
        dest="console_output",
        action="store_false",
        help="Log to file only"
    )

    parser.add_argument(
        "--screen",
        metavar="WIDTHxHEIGHT",
        default=None,
        help="Work area used to place notes (default: detect the primary screen)"
    )

    return parser.parse_args(argv)


def build_placement(config: NotesConfig, screen: Optional[str] = None) -> PlacementPolicy:
    bounds = ScreenBounds.from_size_string(screen) if screen else None
    if bounds is None:
        bounds = detect_work_area()

    return PlacementPolicy(
        bounds,
        horizontal_anchor=config.horizontal_anchor,
        default_width=config.default_width,
        default_height=config.default_height,
        min_width=config.min_width,
        min_height=config.min_height,
    )


def _report_save_failure(error: Exception) -> None:
    print(f"\nWarning: notes could not be saved: {error}", file=sys.stderr)


async def run_cli(collection: NotesCollection) -> None:
    """Run the interactive shell until quit, EOF or a signal."""
    shutdown_coordinator = get_shutdown_coordinator()
    shutdown_task: Optional[asyncio.Task] = None

    shutdown_coordinator.register_cleanup(collection.shutdown)

    loop = asyncio.get_running_loop()

    def signal_handler():
        nonlocal shutdown_task
        if shutdown_task is None or shutdown_task.done():
            shutdown_task = asyncio.create_task(
                shutdown_coordinator.initiate_shutdown("signal")
            )

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            pass  # Windows doesn't support add_signal_handler

    shell = InteractiveShell(collection, shutdown_coordinator)

    try:
        await shell.run()
    except KeyboardInterrupt:
        await shutdown_coordinator.initiate_shutdown("keyboard interrupt")
    except Exception as e:
        logger.error("Unexpected error: %s", e, exc_info=True)
        await shutdown_coordinator.initiate_shutdown("exception")
    finally:
        if not shutdown_coordinator.is_complete:
            await shutdown_coordinator.initiate_shutdown("shell exit")
            await shutdown_coordinator.wait_for_shutdown()


async def main(argv: Optional[list[str]] = None) -> None:
    """
    Main entry point for Sticky Notes.

    Startup: read config, configure logging, load notes, repair geometry.
    Shutdown: the ShutdownCoordinator runs the final save exactly once,
    whether triggered by 'quit', EOF or a signal.
    """
    args = parse_args(argv)
    ensure_directories()

    config_values = await get_config_manager().read_config_async(CONFIG_PATH)
    config = NotesConfig.from_config(config_values, args)

    log_path = configure_logging(config.log_level, console=config.console_output, log_file=APP_LOG_FILE)

    logger.info("=" * 60)
    logger.info("Sticky Notes Starting")
    logger.info("=" * 60)
    logger.info("Notes file: %s", config.notes_file)
    logger.info("Log file: %s", log_path)

    placement = build_placement(config, args.screen)
    storage = NoteStorage(config.notes_file)
    records = await storage.load()

    collection = NotesCollection(
        storage,
        scheduler=AsyncioScheduler(),
        placement=placement,
        config=config,
    )
    collection.initialize(records)
    collection.add_save_failure_listener(_report_save_failure)

    await run_cli(collection)

    logger.info("=" * 60)
    logger.info("Sticky Notes Stopped")
    logger.info("=" * 60)


def run(argv: Optional[list[str]] = None) -> int:
    try:
        asyncio.run(main(argv))
        return 0
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130
    except Exception as exc:  # pragma: no cover - fatal guard
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(run())
