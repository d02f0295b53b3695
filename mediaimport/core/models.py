"""
Core data models for the media importer.

This module defines the data structures shared by the scan-and-copy engine:
- File entries produced by directory listings
- The CopyProgress state union observed by callers
- The error taxonomy raised inside an operation

All models are:
- UI-agnostic (can be used with any frontend)
- Immutable, so a published progress value can be shared across threads
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from pathlib import PurePath
from typing import Any, Optional


# =============================================================================
# Enumerations
# =============================================================================

class CopyState(Enum):
    """State of a copy operation."""
    SCANNING = auto()   # Enumerating source or checking destination
    READY = auto()      # Work list known, nothing copied yet
    COPYING = auto()    # At least one file copied
    COMPLETE = auto()   # Terminal: all files copied
    ERROR = auto()      # Terminal: operation failed
    CANCELLED = auto()  # Terminal: stopped by the caller


TERMINAL_STATES = frozenset({CopyState.COMPLETE, CopyState.ERROR, CopyState.CANCELLED})


# =============================================================================
# File Models
# =============================================================================

@dataclass(frozen=True)
class FileEntry:
    """
    A single child of a directory listing.

    `location` is whatever the owning DirectoryHandle needs to reopen the
    entry (a Path for the local filesystem). It is opaque to the engine.
    """
    name: str
    is_directory: bool
    location: Any = None
    last_modified: Optional[float] = None  # Epoch seconds
    size: Optional[int] = None

    @property
    def extension(self) -> str:
        """Lowercase extension including the dot, or an empty string."""
        return PurePath(self.name).suffix.lower()

    @property
    def is_file(self) -> bool:
        return not self.is_directory


# =============================================================================
# Progress Models
# =============================================================================

@dataclass(frozen=True)
class CopyProgress:
    """Base class for every value published by the progress reporter."""

    @property
    def state(self) -> CopyState:
        raise NotImplementedError

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES


@dataclass(frozen=True)
class Scanning(CopyProgress):
    """Source enumeration or destination reconciliation in progress."""
    message: str = ""

    @property
    def state(self) -> CopyState:
        return CopyState.SCANNING


@dataclass(frozen=True)
class Ready(CopyProgress):
    """Work list computed; copying is about to start."""
    total_files: int
    existing_files: int
    files_to_copy: int

    @property
    def state(self) -> CopyState:
        return CopyState.READY

    @property
    def progress(self) -> float:
        return 0.0


@dataclass(frozen=True)
class Copying(CopyProgress):
    """Published after every successfully copied file."""
    current_file: int
    total_files: int
    progress: float
    current_file_name: str
    estimated_seconds_remaining: int
    existing_files: int
    files_to_copy: int

    @property
    def state(self) -> CopyState:
        return CopyState.COPYING

    @property
    def percent(self) -> float:
        return self.progress * 100


@dataclass(frozen=True)
class Complete(CopyProgress):
    """Every file that needed copying was copied."""
    existing_files: int
    files_to_copy: int

    @property
    def state(self) -> CopyState:
        return CopyState.COMPLETE

    @property
    def progress(self) -> float:
        return 1.0


@dataclass(frozen=True)
class Error(CopyProgress):
    """The operation failed; `message` is meant for the user."""
    message: str

    @property
    def state(self) -> CopyState:
        return CopyState.ERROR


@dataclass(frozen=True)
class Cancelled(CopyProgress):
    """The caller cancelled the operation."""

    @property
    def state(self) -> CopyState:
        return CopyState.CANCELLED


# =============================================================================
# Errors
# =============================================================================

class MediaImportError(Exception):
    """Base class for errors raised inside a copy operation."""
    pass


class ValidationError(MediaImportError):
    """Missing or inaccessible directory, or an empty extension set."""
    pass


class AccessError(MediaImportError):
    """
    A listing or metadata read was refused by the filesystem or provider.

    `is_mtp` is set when the failure carries a removable-media or
    transfer-protocol provider signature.
    """

    def __init__(self, message: str, is_mtp: bool = False):
        super().__init__(message)
        self.is_mtp = is_mtp


class ContentIOError(MediaImportError):
    """Copying the bytes of a single file failed."""

    def __init__(self, file_name: str, message: str, access_denied: bool = False):
        super().__init__(message)
        self.file_name = file_name
        self.access_denied = access_denied
