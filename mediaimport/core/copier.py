"""
Scan-and-copy engine.

Drives one import operation from validation to a terminal state:

    Scanning -> (Ready | Error) -> Copying -> (Complete | Error | Cancelled)

The engine is synchronous and UI-agnostic. It runs on whatever thread calls
`run`, reports every state through a publish callback, and polls a
cancellation callback at directory boundaries, during reconciliation and
before each file. A file already being streamed is never cut short, and
its Copying update is published before cancellation is acted on.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from mediaimport.core.file_types import describe_extensions, mime_type_for, require_extensions
from mediaimport.core.handles import DirectoryHandle, is_mtp_failure
from mediaimport.core.models import (
    AccessError,
    Cancelled,
    Complete,
    ContentIOError,
    CopyProgress,
    Copying,
    Error,
    FileEntry,
    Ready,
    Scanning,
    ValidationError,
)
from mediaimport.core.naming import DestinationNamer
from mediaimport.core.reconciler import DEFAULT_CHECK_INTERVAL, DestinationReconciler
from mediaimport.core.scanner import MediaScanner, count_by_extension, filter_by_extension


SCANNING_SOURCE_MESSAGE = "Scanning source directory..."
CHECKING_DESTINATION_MESSAGE = "Checking destination for existing files..."

MTP_ACCESS_MESSAGE = (
    "MTP device access issue. Please ensure the device is properly connected "
    "and try selecting the directory again."
)
PERMISSION_DENIED_MESSAGE = (
    "Permission denied. Please grant storage permissions and try again."
)


@dataclass
class CopyOptions:
    """Options for the copy engine."""
    buffer_size: int = 65536
    cancel_check_interval: int = DEFAULT_CHECK_INTERVAL


class CopyEngine:
    """
    Copies media files from a source tree into a flat destination.

    Files are copied strictly one after another in enumeration order. The
    first failing file stops the whole operation, after its partial
    destination entry has been removed.
    """

    def __init__(
        self,
        publish: Callable[[CopyProgress], None],
        is_cancelled: Optional[Callable[[], bool]] = None,
        options: Optional[CopyOptions] = None,
        namer: Optional[DestinationNamer] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._publish = publish
        self._is_cancelled = is_cancelled or (lambda: False)
        self.options = options or CopyOptions()
        self.namer = namer or DestinationNamer()
        self._clock = clock

    def run(
        self,
        source: Optional[DirectoryHandle],
        dest: Optional[DirectoryHandle],
        extensions: Optional[Iterable[str]]
    ) -> CopyProgress:
        """
        Run one import operation to completion.

        Never raises: every outcome is published and returned as a
        terminal CopyProgress value.
        """
        try:
            final = self._run(source, dest, extensions)
        except Exception as e:
            logging.exception("CopyEngine - Unexpected failure during copying")
            final = Error(f"Error during copying: {e}")

        self._publish(final)
        return final

    def _run(
        self,
        source: Optional[DirectoryHandle],
        dest: Optional[DirectoryHandle],
        extensions: Optional[Iterable[str]]
    ) -> CopyProgress:
        try:
            exts = require_extensions(extensions)
            self.validate_directory(source, "Source")
            self.validate_directory(dest, "Destination")
        except ValidationError as e:
            logging.error(f"CopyEngine - Validation failed: {e}")
            return Error(str(e))

        logging.info(
            f"CopyEngine - Starting import: source={source!r}, dest={dest!r}, "
            f"extensions={sorted(exts)}"
        )

        # Scan source
        self._publish(Scanning(SCANNING_SOURCE_MESSAGE))
        scanner = MediaScanner(self._is_cancelled)
        try:
            all_files = scanner.list_all_files(source)
        except AccessError as e:
            logging.error(f"CopyEngine - Source scan failed: {e}")
            return Error(MTP_ACCESS_MESSAGE if e.is_mtp else PERMISSION_DENIED_MESSAGE)

        if self._is_cancelled():
            return self._cancelled()

        candidates = filter_by_extension(all_files, exts)
        if not candidates:
            logging.info(f"CopyEngine - No matching files among {len(all_files)} scanned")
            return Error(f"No {describe_extensions(exts)} files found in source directory")

        logging.info(f"CopyEngine - Matching files by extension: {count_by_extension(candidates)}")

        # Reconcile with destination
        self._publish(Scanning(CHECKING_DESTINATION_MESSAGE))
        reconciler = DestinationReconciler(
            source,
            namer=self.namer,
            is_cancelled=self._is_cancelled,
            check_interval=self.options.cancel_check_interval,
        )
        plan = reconciler.partition(candidates, dest)

        if plan.cancelled or self._is_cancelled():
            return self._cancelled()

        existing_count = len(plan.existing)
        if not plan.to_copy:
            logging.info(f"CopyEngine - All {existing_count} files already exist in destination")
            return Complete(existing_files=existing_count, files_to_copy=0)

        total = len(plan.to_copy)
        self._publish(Ready(total_files=total, existing_files=existing_count, files_to_copy=total))

        # Copy
        start = self._clock()
        for current, entry in enumerate(plan.to_copy, start=1):
            if self._is_cancelled():
                return self._cancelled()

            target_name = plan.destination_names[entry]

            try:
                self.copy_file(source, entry, dest, target_name)
            except ContentIOError as e:
                logging.error(f"CopyEngine - Stopping at {e.file_name}: {e}")
                if e.access_denied:
                    return Error(
                        f"Access denied to file: {e.file_name}. "
                        f"This may be due to MTP device restrictions."
                    )
                return Error(f"Error copying file {e.file_name}: {e}")

            self._publish(self._progress(current, total, entry.name, start, existing_count))

        logging.info(f"CopyEngine - Copied {total} files, {existing_count} already existed")
        return Complete(existing_files=existing_count, files_to_copy=total)

    def validate_directory(self, handle: Optional[DirectoryHandle], label: str) -> None:
        """
        Check that a directory exists, is readable and can be listed.

        Raises ValidationError with a user-facing message.
        """
        if handle is None:
            raise ValidationError(f"{label} directory is not accessible")

        try:
            if not handle.exists():
                raise ValidationError(f"{label} directory does not exist")
            if not handle.can_read():
                raise ValidationError(f"{label} directory is not readable")
            children = handle.list_children()
        except ValidationError:
            raise
        except AccessError as e:
            if e.is_mtp:
                raise ValidationError(
                    f"MTP device access issue with {label.lower()} directory. Please ensure "
                    f"the device is properly connected and try selecting the directory again."
                ) from e
            raise ValidationError(
                f"Access denied to {label.lower()} directory. Please check permissions."
            ) from e
        except Exception as e:
            raise ValidationError(f"Error accessing {label.lower()} directory: {e}") from e

        logging.debug(f"CopyEngine - {label} directory accessible, contains {len(children)} items")

    def copy_file(
        self,
        source: DirectoryHandle,
        entry: FileEntry,
        dest: DirectoryHandle,
        target_name: str
    ) -> int:
        """
        Stream one file into a newly created destination entry.

        Returns bytes copied. On failure the partial entry is deleted and
        ContentIOError is raised.
        """
        created: Optional[FileEntry] = None
        copied = 0
        try:
            created = dest.create_file(mime_type_for(entry.name), target_name)
            with source.open_read(entry) as src:
                with dest.open_write(created) as dst:
                    while chunk := src.read(self.options.buffer_size):
                        dst.write(chunk)
                        copied += len(chunk)
        except (OSError, AccessError) as e:
            if created is not None:
                self._discard(dest, created)
            raise ContentIOError(
                entry.name,
                str(e),
                access_denied=isinstance(e, PermissionError) or is_mtp_failure(e),
            ) from e

        logging.debug(f"CopyEngine - Copied {entry.name} -> {target_name} ({copied} bytes)")
        return copied

    def _discard(self, dest: DirectoryHandle, created: FileEntry) -> None:
        try:
            dest.delete(created)
        except OSError as e:
            logging.warning(f"CopyEngine - Could not remove partial file {created.name}: {e}")

    def _progress(
        self,
        current: int,
        total: int,
        file_name: str,
        start: float,
        existing: int
    ) -> Copying:
        elapsed_ms = (self._clock() - start) * 1000
        remaining = int((elapsed_ms / current) * (total - current) / 1000)
        return Copying(
            current_file=current,
            total_files=total,
            progress=current / total,
            current_file_name=file_name,
            estimated_seconds_remaining=remaining,
            existing_files=existing,
            files_to_copy=total,
        )

    def _cancelled(self) -> Cancelled:
        logging.info("CopyEngine - Operation cancelled")
        return Cancelled()
