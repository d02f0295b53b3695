"""
Destination reconciliation.

Splits candidate files into those already present in the destination and
those still to copy, keyed by their date-prefixed destination name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from mediaimport.core.handles import DirectoryHandle
from mediaimport.core.models import FileEntry
from mediaimport.core.naming import DestinationNamer


DEFAULT_CHECK_INTERVAL = 50


@dataclass
class Partition:
    """Result of reconciling candidates against a destination."""
    to_copy: list[FileEntry] = field(default_factory=list)
    existing: list[FileEntry] = field(default_factory=list)
    destination_names: dict[FileEntry, str] = field(default_factory=dict)
    cancelled: bool = False

    @property
    def total(self) -> int:
        return len(self.to_copy) + len(self.existing)

    def destination_name(self, entry: FileEntry) -> Optional[str]:
        return self.destination_names.get(entry)


class DestinationReconciler:
    """
    Classifies candidates with a single listing of the destination.

    Each destination name is claimed by at most one candidate: when two
    source files map to the same name (the same file name and date in
    different folders), only the first is copied.

    If the destination cannot be listed, every candidate is treated as
    missing: an empty destination is the common case.
    """

    def __init__(
        self,
        source: DirectoryHandle,
        namer: Optional[DestinationNamer] = None,
        is_cancelled: Optional[Callable[[], bool]] = None,
        check_interval: int = DEFAULT_CHECK_INTERVAL,
    ):
        self.source = source
        self.namer = namer or DestinationNamer()
        self._is_cancelled = is_cancelled or (lambda: False)
        self._check_interval = max(1, check_interval)

    def existing_names(self, dest: DirectoryHandle) -> set[str]:
        """Names of the destination's immediate children."""
        try:
            return {entry.name for entry in dest.list_children()}
        except Exception as e:
            logging.warning(
                f"DestinationReconciler - Could not list destination {dest.name}, "
                f"assuming it is empty: {e}"
            )
            return set()

    def partition(
        self,
        candidates: Sequence[FileEntry],
        dest: DirectoryHandle
    ) -> Partition:
        """Split `candidates` into files to copy and files already present."""
        present = self.existing_names(dest)
        result = Partition()

        for index, entry in enumerate(candidates):
            if index % self._check_interval == 0 and self._is_cancelled():
                logging.info(
                    f"DestinationReconciler - Cancelled after {index} of {len(candidates)} files"
                )
                result.cancelled = True
                break

            name = self.namer.destination_name(entry, lambda: self.source.open_read(entry))
            result.destination_names[entry] = name

            if name in present:
                result.existing.append(entry)
            else:
                # A later candidate with the same name counts as present
                present.add(name)
                result.to_copy.append(entry)

        logging.info(
            f"DestinationReconciler - {result.total} checked, {len(result.existing)} exist, "
            f"{len(result.to_copy)} to copy"
        )
        return result


def partition(
    candidates: Sequence[FileEntry],
    source: DirectoryHandle,
    dest: DirectoryHandle,
    is_cancelled: Optional[Callable[[], bool]] = None,
    check_interval: int = DEFAULT_CHECK_INTERVAL,
) -> Partition:
    """Split candidates into (to_copy, existing). See DestinationReconciler."""
    reconciler = DestinationReconciler(
        source,
        is_cancelled=is_cancelled,
        check_interval=check_interval,
    )
    return reconciler.partition(candidates, dest)
