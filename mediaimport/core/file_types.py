"""
Media file types known to the importer.

Provides:
- Selectable extension categories (normal images, raw images, videos)
- The set of extensions that may carry EXIF capture dates
- MIME type lookup for created destination files
- Normalisation of user-supplied extension lists
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from mediaimport.core.models import ValidationError


DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class FileTypeCategory:
    """A named group of extensions offered to the user as one choice."""
    name: str
    description: str
    extensions: tuple[str, ...]


NORMAL_IMAGES = FileTypeCategory(
    name="Normal Images",
    description="Common image formats (JPG, PNG, GIF, BMP)",
    extensions=(".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".tiff", ".tif"),
)

RAW_IMAGES = FileTypeCategory(
    name="Raw Images",
    description="Professional camera raw formats (CR2, NEF, ARW, etc.)",
    extensions=(".cr2", ".nef", ".arw", ".dng", ".raf", ".orf", ".rw2", ".pef", ".srw"),
)

VIDEOS = FileTypeCategory(
    name="Videos",
    description="Video formats (MP4, MOV, AVI, MKV, etc.)",
    extensions=(".mp4", ".mov", ".avi", ".mkv", ".wmv", ".flv", ".webm", ".m4v", ".3gp"),
)

CATEGORIES: tuple[FileTypeCategory, ...] = (NORMAL_IMAGES, RAW_IMAGES, VIDEOS)

# Extensions whose files are probed for an embedded capture date
IMAGE_EXTENSIONS = frozenset({
    "jpg", "jpeg", "png", "tiff", "tif", "webp", "gif", "bmp",
    "dng", "cr2", "nef", "arw", "raf", "orf", "rw2", "pef", "srw",
})

MIME_TYPES: dict[str, str] = {
    # Images
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
    ".tiff": "image/tiff",
    ".tif": "image/tiff",
    # Raw images
    ".cr2": "image/x-canon-cr2",
    ".nef": "image/x-nikon-nef",
    ".arw": "image/x-sony-arw",
    ".dng": "image/x-adobe-dng",
    ".raf": "image/x-fuji-raf",
    ".orf": "image/x-olympus-orf",
    ".rw2": "image/x-panasonic-rw2",
    ".pef": "image/x-pentax-pef",
    ".srw": "image/x-samsung-srw",
    # Videos
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
    ".mkv": "video/x-matroska",
    ".wmv": "video/x-ms-wmv",
    ".flv": "video/x-flv",
    ".webm": "video/webm",
    ".m4v": "video/x-m4v",
    ".3gp": "video/3gpp",
}


def mime_type_for(name: str) -> str:
    """Get the MIME type for a file name from its extension."""
    dot = name.rfind('.')
    if dot < 0:
        return DEFAULT_MIME_TYPE
    return MIME_TYPES.get(name[dot:].lower(), DEFAULT_MIME_TYPE)


def is_image_extension(name: str) -> bool:
    """Check if a file name has an extension that may carry EXIF data."""
    dot = name.rfind('.')
    if dot < 0:
        return False
    return name[dot + 1:].lower() in IMAGE_EXTENSIONS


def normalize_extensions(extensions: str | Iterable[str]) -> frozenset[str]:
    """
    Normalise extensions to lowercase, dot-prefixed form.

    Accepts a comma-separated string ("jpg,PNG") or any iterable of
    strings, with or without leading dots. Blank entries are dropped.
    """
    if isinstance(extensions, str):
        extensions = extensions.split(',')

    normalized = set()
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        if not ext.startswith('.'):
            ext = '.' + ext
        normalized.add(ext)

    return frozenset(normalized)


def require_extensions(extensions: Optional[Iterable[str]]) -> frozenset[str]:
    """Normalise extensions, raising ValidationError if none remain."""
    normalized = normalize_extensions(extensions or ())
    if not normalized:
        raise ValidationError("No file types selected")
    return normalized


def extensions_for_categories(names: Iterable[str]) -> frozenset[str]:
    """
    Collect the extensions of the named categories.

    Names match case-insensitively against the category name or its first
    word ("raw" selects "Raw Images").
    """
    selected = set()
    for requested in names:
        key = requested.strip().lower()
        for category in CATEGORIES:
            full = category.name.lower()
            if key == full or key == full.split()[0]:
                selected.update(category.extensions)
                break
        else:
            raise ValueError(f"Unknown file type category: {requested}")
    return frozenset(selected)


def describe_extensions(extensions: Iterable[str]) -> str:
    """Format extensions for messages, e.g. {'.png', '.jpg'} -> 'JPG/PNG'."""
    return '/'.join(sorted(ext.lstrip('.').upper() for ext in extensions))
