"""
Directory scanner for media import.

Provides:
- Recursive enumeration of every file under a directory handle
- Cooperative cancellation at each directory boundary
- Case-insensitive extension filtering
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Sequence

from mediaimport.core.handles import DirectoryHandle
from mediaimport.core.models import FileEntry


CancelCheck = Callable[[], bool]


def _never_cancelled() -> bool:
    return False


class MediaScanner:
    """
    Walks a directory tree and collects its files.

    Files of a directory are listed before its sub-directories are
    descended into; both are visited in name order. Listing errors
    propagate as AccessError so the caller can report them.
    """

    def __init__(self, is_cancelled: Optional[CancelCheck] = None):
        self._is_cancelled = is_cancelled or _never_cancelled
        self.directories_scanned = 0

    def list_all_files(self, root: DirectoryHandle) -> list[FileEntry]:
        """
        List every file under `root`, at any depth.

        On cancellation the files found so far are returned.
        """
        self.directories_scanned = 0
        files: list[FileEntry] = []
        self._walk(root, files)
        logging.info(
            f"MediaScanner - Found {len(files)} files in "
            f"{self.directories_scanned} directories under {root.name}"
        )
        return files

    def _walk(self, directory: DirectoryHandle, files: list[FileEntry]) -> bool:
        """Walk one directory. Returns False once cancellation is seen."""
        if self._is_cancelled():
            logging.info("MediaScanner - Scan cancelled")
            return False

        children = sorted(directory.list_children(), key=lambda entry: entry.name)
        self.directories_scanned += 1
        logging.debug(f"MediaScanner - Scanning {directory.name} ({len(children)} items)")

        subdirectories = []
        for entry in children:
            if entry.is_directory:
                subdirectories.append(entry)
            else:
                files.append(entry)

        for entry in subdirectories:
            if self._is_cancelled():
                logging.info("MediaScanner - Scan cancelled")
                return False
            if not self._walk(directory.open_directory(entry), files):
                return False

        return True


def list_all_files(
    root: DirectoryHandle,
    is_cancelled: Optional[CancelCheck] = None
) -> list[FileEntry]:
    """List every file under `root`. See MediaScanner.list_all_files."""
    return MediaScanner(is_cancelled).list_all_files(root)


def filter_by_extension(
    files: Iterable[FileEntry],
    extensions: Iterable[str]
) -> list[FileEntry]:
    """
    Keep the files whose lowercased name ends with one of `extensions`.

    Directories never match.
    """
    suffixes = tuple(ext.lower() for ext in extensions)
    if not suffixes:
        return []
    return [
        entry for entry in files
        if not entry.is_directory and entry.name.lower().endswith(suffixes)
    ]


def count_by_extension(files: Sequence[FileEntry]) -> dict[str, int]:
    """Count files per lowercase extension, for scan summaries."""
    counts: dict[str, int] = {}
    for entry in files:
        counts[entry.extension] = counts.get(entry.extension, 0) + 1
    return counts
