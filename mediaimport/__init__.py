"""
Media importer.

Copies photos and videos from a source directory tree into a flat
destination directory, renaming each file with its capture date and
skipping files that were imported before.
"""

__version__ = "1.0.0"
