"""
Directory handles used by the copy engine.

A DirectoryHandle is the only way the engine touches storage. The caller
resolves platform identifiers (paths, provider URIs) into handles before an
operation starts; the engine never keeps a handle past one operation.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO

from mediaimport.core.models import AccessError, FileEntry


# Substrings that identify a removable-media / transfer-protocol provider in
# an error message or a mount path
MTP_SIGNATURES = (
    "MtpDocumentsProvider",
    "mtp:host=",
    "gphoto2:host=",
)


def is_mtp_failure(*texts: object) -> bool:
    """Check if any of the given texts carries a known MTP provider signature."""
    for text in texts:
        if text is None:
            continue
        text = str(text)
        if any(signature in text for signature in MTP_SIGNATURES):
            return True
    return False


class DirectoryHandle(ABC):
    """
    Capability interface over one directory.

    Listing methods raise AccessError when the provider refuses access.
    Stream methods raise OSError, which the engine turns into a
    per-file error.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the directory itself."""

    @property
    def display_name(self) -> str:
        """Human-friendly label for the directory."""
        return self.name

    @abstractmethod
    def exists(self) -> bool:
        """Check if the directory exists."""

    @abstractmethod
    def can_read(self) -> bool:
        """Check if the directory can be listed."""

    @abstractmethod
    def list_children(self) -> list[FileEntry]:
        """List the immediate children of the directory."""

    @abstractmethod
    def open_directory(self, entry: FileEntry) -> DirectoryHandle:
        """Get a handle for a sub-directory entry of this directory."""

    @abstractmethod
    def open_read(self, entry: FileEntry) -> BinaryIO:
        """Open a file found anywhere under this directory for reading."""

    @abstractmethod
    def create_file(self, mime_type: str, name: str) -> FileEntry:
        """Create an empty child file and return its entry. Fails if `name` is taken."""

    @abstractmethod
    def open_write(self, entry: FileEntry) -> BinaryIO:
        """Open a child file for writing, truncating it."""

    @abstractmethod
    def delete(self, entry: FileEntry) -> None:
        """Delete a child file."""


class LocalDirectoryHandle(DirectoryHandle):
    """
    DirectoryHandle over a local filesystem path (including gvfs mounts).

    Symlinks to directories are listed as files unless `follow_symlinks`
    is set, so a link back to an ancestor cannot make a walk revisit it.
    """

    def __init__(self, path: Path | str, follow_symlinks: bool = False):
        self.path = Path(path)
        self.follow_symlinks = follow_symlinks

    def __repr__(self) -> str:
        return f"LocalDirectoryHandle({str(self.path)!r})"

    @property
    def name(self) -> str:
        return self.path.name or str(self.path)

    @property
    def display_name(self) -> str:
        path_text = str(self.path)
        if is_mtp_failure(path_text):
            parts = [part.lower() for part in self.path.parts]
            if "dcim" in parts:
                return "Camera DCIM"
            if "pictures" in parts:
                return "Camera Pictures"
            return "MTP Device"
        return self.name

    def exists(self) -> bool:
        return self.path.is_dir()

    def can_read(self) -> bool:
        return os.access(self.path, os.R_OK | os.X_OK)

    def list_children(self) -> list[FileEntry]:
        try:
            with os.scandir(self.path) as it:
                entries = [
                    self._to_entry(item) for item in it
                    if not self._is_skipped_link(item)
                ]
        except OSError as e:
            logging.debug(f"LocalDirectoryHandle - Listing failed for {self.path}: {e}")
            raise AccessError(
                f"Cannot list {self.path}: {e}",
                is_mtp=is_mtp_failure(e, self.path),
            ) from e
        return entries

    def open_directory(self, entry: FileEntry) -> LocalDirectoryHandle:
        return LocalDirectoryHandle(self._path_of(entry), follow_symlinks=self.follow_symlinks)

    def open_read(self, entry: FileEntry) -> BinaryIO:
        return open(self._path_of(entry), 'rb')

    def create_file(self, mime_type: str, name: str) -> FileEntry:
        # The local filesystem has no use for the MIME type.
        # Raises FileExistsError rather than replacing an existing file.
        path = self.path / name
        with open(path, 'xb'):
            pass
        return FileEntry(name=name, is_directory=False, location=path)

    def open_write(self, entry: FileEntry) -> BinaryIO:
        return open(self._path_of(entry), 'wb')

    def delete(self, entry: FileEntry) -> None:
        self._path_of(entry).unlink(missing_ok=True)

    def _path_of(self, entry: FileEntry) -> Path:
        if isinstance(entry.location, Path):
            return entry.location
        return self.path / entry.name

    def _is_skipped_link(self, item: os.DirEntry) -> bool:
        if self.follow_symlinks or not item.is_symlink():
            return False
        try:
            is_linked_directory = item.is_dir()
        except OSError:
            return False
        if is_linked_directory:
            logging.debug(f"LocalDirectoryHandle - Skipping directory symlink {item.path}")
        return is_linked_directory

    def _to_entry(self, item: os.DirEntry) -> FileEntry:
        path = Path(item.path)
        try:
            is_directory = item.is_dir(follow_symlinks=self.follow_symlinks)
            stat_result = item.stat()
            last_modified = stat_result.st_mtime
            size = stat_result.st_size if not is_directory else None
        except OSError as e:
            logging.debug(f"LocalDirectoryHandle - Failed to stat {path}: {e}")
            is_directory = False
            last_modified = None
            size = None

        return FileEntry(
            name=item.name,
            is_directory=is_directory,
            location=path,
            last_modified=last_modified,
            size=size,
        )
