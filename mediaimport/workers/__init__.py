"""
Background workers for non-blocking operations.

All workers run on their own QThread and report through
Qt signals and the progress reporter.
"""

from mediaimport.workers.base_worker import (
    BaseWorker,
    CancelledException,
    WorkerSignals,
    WorkerState,
    WorkerThread,
)
from mediaimport.workers.copy_worker import (
    CopyWorker,
    FileCopyManager,
)

__all__ = [
    # Base
    'BaseWorker',
    'CancelledException',
    'WorkerSignals',
    'WorkerState',
    'WorkerThread',
    # Copy
    'CopyWorker',
    'FileCopyManager',
]
