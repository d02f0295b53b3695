"""
Destination naming for imported media.

Every imported file is renamed to "<yyyymmdd>-<original name>". The date is
taken from, in order:
1. The EXIF capture date of image files (DateTimeOriginal, then DateTime)
2. The file's last-modified time
3. The current time

The same function names files for both the existence check and the copy,
so a second import of the same source finds everything already present.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import BinaryIO, Callable, Optional

from PIL import Image

from mediaimport.core.file_types import is_image_extension
from mediaimport.core.models import FileEntry


EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"
PREFIX_FORMAT = "%Y%m%d"

# EXIF tag numbers
EXIF_IFD_POINTER = 0x8769
TAG_DATETIME = 0x0132
TAG_DATETIME_ORIGINAL = 0x9003


def read_capture_date(stream: BinaryIO) -> Optional[datetime]:
    """
    Read the EXIF capture date from an image stream.

    Returns None when the image carries no usable date. Unreadable
    images raise whatever Pillow raises.
    """
    with Image.open(stream) as image:
        exif = image.getexif()
        value = exif.get_ifd(EXIF_IFD_POINTER).get(TAG_DATETIME_ORIGINAL)
        if not value:
            value = exif.get(TAG_DATETIME)

    if not value:
        return None
    if isinstance(value, bytes):
        value = value.decode('ascii', errors='ignore')
    return datetime.strptime(value.strip('\x00 '), EXIF_DATE_FORMAT)


class DestinationNamer:
    """
    Computes date-prefixed destination names.

    `clock` supplies the current time for files with no other date.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock

    def date_for(
        self,
        entry: FileEntry,
        open_stream: Callable[[], BinaryIO]
    ) -> datetime:
        """Pick the date used to prefix `entry`."""
        if is_image_extension(entry.name):
            try:
                with open_stream() as stream:
                    captured = read_capture_date(stream)
                if captured is not None:
                    return captured
            except Exception as e:
                logging.debug(f"DestinationNamer - No EXIF date for {entry.name}: {e}")

        if entry.last_modified is not None and entry.last_modified > 0:
            try:
                return datetime.fromtimestamp(entry.last_modified)
            except (OverflowError, OSError, ValueError) as e:
                logging.debug(f"DestinationNamer - Bad modification time for {entry.name}: {e}")

        return self._clock()

    def date_prefix(
        self,
        entry: FileEntry,
        open_stream: Callable[[], BinaryIO]
    ) -> str:
        return self.date_for(entry, open_stream).strftime(PREFIX_FORMAT)

    def destination_name(
        self,
        entry: FileEntry,
        open_stream: Callable[[], BinaryIO]
    ) -> str:
        """Get the name `entry` is stored under in the destination."""
        return f"{self.date_prefix(entry, open_stream)}-{entry.name}"


def compute_destination_name(
    entry: FileEntry,
    open_stream: Callable[[], BinaryIO],
    now: Optional[Callable[[], datetime]] = None
) -> str:
    """Compute the date-prefixed destination name for one file."""
    return DestinationNamer(now or datetime.now).destination_name(entry, open_stream)
