"""
Scan-and-copy engine.

Provides functionality for:
- Recursive directory scanning
- Extension filtering
- Date-prefixed destination naming
- Reconciliation against the destination
- Sequential copying with progress and cancellation
"""

from mediaimport.core.models import (
    AccessError,
    Cancelled,
    Complete,
    ContentIOError,
    CopyProgress,
    CopyState,
    Copying,
    Error,
    FileEntry,
    MediaImportError,
    Ready,
    Scanning,
    ValidationError,
)
from mediaimport.core.handles import (
    DirectoryHandle,
    LocalDirectoryHandle,
)
from mediaimport.core.scanner import (
    MediaScanner,
    list_all_files,
    filter_by_extension,
)
from mediaimport.core.naming import (
    DestinationNamer,
    compute_destination_name,
)
from mediaimport.core.reconciler import (
    DestinationReconciler,
    Partition,
    partition,
)
from mediaimport.core.copier import (
    CopyEngine,
    CopyOptions,
)

__all__ = [
    # Models
    'AccessError',
    'Cancelled',
    'Complete',
    'ContentIOError',
    'CopyProgress',
    'CopyState',
    'Copying',
    'Error',
    'FileEntry',
    'MediaImportError',
    'Ready',
    'Scanning',
    'ValidationError',
    # Handles
    'DirectoryHandle',
    'LocalDirectoryHandle',
    # Scanner
    'MediaScanner',
    'list_all_files',
    'filter_by_extension',
    # Naming
    'DestinationNamer',
    'compute_destination_name',
    # Reconciler
    'DestinationReconciler',
    'Partition',
    'partition',
    # Copier
    'CopyEngine',
    'CopyOptions',
]
