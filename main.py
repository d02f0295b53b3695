"""
Main entry point for the Media Importer.

Parses the command line, sets up logging from the settings file, then
runs one import on a worker thread and prints its progress until it ends.
The exit status reflects the final state.
"""

from __future__ import annotations

import argparse
import faulthandler
import logging
import signal
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from PyQt6.QtCore import QCoreApplication, QTimer

from mediaimport import __version__
from mediaimport.core.file_types import (
    CATEGORIES,
    extensions_for_categories,
    normalize_extensions,
)
from mediaimport.core.handles import LocalDirectoryHandle
from mediaimport.core.models import (
    Cancelled,
    Complete,
    CopyProgress,
    Copying,
    Error,
    Ready,
    Scanning,
)
from mediaimport.services.settings import SettingsManager
from mediaimport.workers.copy_worker import FileCopyManager


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "MediaImport"
APP_VERSION = __version__

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 130


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class CommandLineArgs:
    """Options for one import run."""
    source: str = ""
    destination: str = ""
    extensions: List[str] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    config_file: Optional[str] = None
    log_level: Optional[str] = None
    log_file: Optional[str] = None


# =============================================================================
# Logging Setup
# =============================================================================

class LogFormatter(logging.Formatter):
    """
    Log formatter for the terminal and the log file.

    The terminal gets a compact, coloured line so log output stays readable
    between progress lines; the file gets timestamps and logger names.
    """

    CONSOLE_FORMAT = "%(levelname)s: %(message)s"
    FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(threadName)s | %(message)s"

    COLORS = {
        logging.DEBUG: "\033[2m",      # Dim
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, console: bool = True):
        super().__init__(
            fmt=self.CONSOLE_FORMAT if console else self.FILE_FORMAT,
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.use_colors = console and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        if not self.use_colors or record.levelno not in self.COLORS:
            return line
        return f"{self.COLORS[record.levelno]}{line}{self.RESET}"


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Route log records to stderr and, optionally, to a UTF-8 log file.

    stdout is left to the progress lines. Unknown level names fall back
    to INFO.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    handlers: list[logging.Handler] = []

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(LogFormatter(console=True))
    handlers.append(console)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        to_file = logging.FileHandler(log_file, encoding="utf-8")
        to_file.setFormatter(LogFormatter(console=False))
        handlers.append(to_file)

    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)

    # Pillow logs every decoded chunk at DEBUG
    logging.getLogger("PIL").setLevel(logging.WARNING)

    return logging.getLogger()


# =============================================================================
# Exception Handling
# =============================================================================

class ExceptionHandler:
    """sys.excepthook that sends uncaught errors to the log."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def __call__(self, exc_type: type, exc_value: BaseException, exc_tb) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return

        self.logger.critical(f"{APP_NAME} crashed", exc_info=(exc_type, exc_value, exc_tb))

# =============================================================================
# Command Line Parsing
# =============================================================================

def parse_arguments(args: Optional[List[str]] = None) -> CommandLineArgs:
    """Parse `args` (sys.argv when None). Comma-separated --ext values are split."""
    category_names = ", ".join(category.name.split()[0].lower() for category in CATEGORIES)

    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Copy photos and videos into a date-prefixed, flat destination folder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Categories: {category_names}

Examples:
  %(prog)s /media/camera/DCIM ~/Pictures/Imported
  %(prog)s -e jpg,png /media/camera ~/Pictures
  %(prog)s -c raw -c videos /media/camera ~/Pictures
        """
    )

    parser.add_argument('source', help='Directory to import from')
    parser.add_argument('destination', help='Directory to import into')
    parser.add_argument(
        '-e', '--ext',
        action='append',
        default=[],
        metavar='EXTS',
        help='Comma-separated extensions to import (repeatable)'
    )
    parser.add_argument(
        '-c', '--category',
        action='append',
        default=[],
        metavar='NAME',
        help='File type category to import (repeatable)'
    )
    parser.add_argument(
        '--config',
        dest='config_file',
        metavar='FILE',
        help='Settings file to use instead of the default'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        type=str.upper,
        help='Logging level (default: from settings)'
    )
    parser.add_argument('--log-file', metavar='FILE', help='Also write logs to FILE')
    parser.add_argument('--version', action='version', version=f'%(prog)s {APP_VERSION}')

    parsed = parser.parse_args(args)

    extensions: List[str] = []
    for value in parsed.ext:
        extensions.extend(value.split(','))

    return CommandLineArgs(
        source=parsed.source,
        destination=parsed.destination,
        extensions=extensions,
        categories=parsed.category,
        config_file=parsed.config_file,
        log_level=parsed.log_level,
        log_file=parsed.log_file,
    )


def resolve_extensions(args: CommandLineArgs, defaults: List[str]) -> frozenset[str]:
    """Combine --ext and --category selections, or fall back to the defaults."""
    selected = set(normalize_extensions(args.extensions))
    if args.categories:
        selected.update(extensions_for_categories(args.categories))
    if not selected:
        selected.update(normalize_extensions(defaults))
    return frozenset(selected)


# =============================================================================
# Progress Rendering
# =============================================================================

def format_time(seconds: int) -> str:
    """Format a remaining-time estimate, e.g. 75 -> '1m 15s'."""
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m {seconds % 60}s"
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m"


def describe_progress(progress: CopyProgress) -> str:
    """Render one progress value as a single line."""
    if isinstance(progress, Scanning):
        return progress.message
    if isinstance(progress, Ready):
        return (
            f"Ready: {progress.files_to_copy} to copy, "
            f"{progress.existing_files} already present"
        )
    if isinstance(progress, Copying):
        line = (
            f"[{progress.current_file}/{progress.total_files}] "
            f"{progress.percent:5.1f}% {progress.current_file_name}"
        )
        if progress.estimated_seconds_remaining > 0:
            line += f" (about {format_time(progress.estimated_seconds_remaining)} left)"
        return line
    if isinstance(progress, Complete):
        return (
            f"Complete: {progress.files_to_copy} copied, "
            f"{progress.existing_files} already present"
        )
    if isinstance(progress, Error):
        return f"Error: {progress.message}"
    if isinstance(progress, Cancelled):
        return "Cancelled"
    return str(progress)


def exit_code_for(progress: Optional[CopyProgress]) -> int:
    if isinstance(progress, Complete):
        return EXIT_OK
    if isinstance(progress, Cancelled):
        return EXIT_CANCELLED
    return EXIT_ERROR


# =============================================================================
# Main
# =============================================================================

def run_import(app: QCoreApplication, args: CommandLineArgs, settings_manager: SettingsManager) -> int:
    """Run one import inside the Qt event loop and return the exit code."""
    settings = settings_manager.settings.importer
    extensions = resolve_extensions(args, settings.extensions)

    source = LocalDirectoryHandle(Path(args.source).expanduser())
    dest = LocalDirectoryHandle(Path(args.destination).expanduser())
    print(f"Importing {source.display_name} -> {dest.display_name}")

    manager = FileCopyManager(settings.to_copy_options())

    def on_progress(progress: CopyProgress) -> None:
        print(describe_progress(progress), flush=True)
        if progress.is_terminal:
            app.quit()

    # Queued into the main thread by Qt
    manager.progress.changed.connect(on_progress)

    # Let Python see SIGINT while the event loop runs
    signal.signal(signal.SIGINT, lambda signum, frame: manager.cancel())
    heartbeat = QTimer()
    heartbeat.timeout.connect(lambda: None)
    heartbeat.start(200)

    manager.start_copying(source, dest, extensions)
    app.exec()
    manager.wait()

    return exit_code_for(manager.progress.value)


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point."""
    faulthandler.enable()

    args = parse_arguments(argv)

    settings_path = Path(args.config_file).expanduser() if args.config_file else None
    settings_manager = SettingsManager(settings_path)
    log_settings = settings_manager.settings.log

    log_file = args.log_file or log_settings.log_file
    logger = setup_logging(
        args.log_level or log_settings.level,
        Path(log_file).expanduser() if log_file else None,
    )
    sys.excepthook = ExceptionHandler(logger)

    logging.info(f"Starting {APP_NAME} {APP_VERSION}")

    try:
        extensions_for_categories(args.categories)
    except ValueError as e:
        logging.error(str(e))
        return EXIT_ERROR

    app = QCoreApplication(sys.argv[:1])
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)

    return run_import(app, args, settings_manager)


if __name__ == "__main__":
    sys.exit(main())
