"""
Workers for media import operations.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from PyQt6.QtCore import QObject, QThread, Qt

from mediaimport.core.copier import CopyEngine, CopyOptions
from mediaimport.core.handles import DirectoryHandle
from mediaimport.core.models import Cancelled, CopyProgress, Error
from mediaimport.services.progress import ProgressReporter
from mediaimport.workers.base_worker import BaseWorker, WorkerThread


class CopyWorker(BaseWorker):
    """
    Worker that runs one import operation.

    If a previous operation's thread is given, the worker waits for it to
    finish before touching either directory. A worker cancelled while
    waiting stops there and publishes Cancelled; a worker that fails
    outside the engine publishes Error. Both handlers run on the worker
    thread.
    """

    def __init__(
        self,
        source: Optional[DirectoryHandle],
        dest: Optional[DirectoryHandle],
        extensions: Iterable[str],
        reporter: ProgressReporter,
        generation: int,
        options: Optional[CopyOptions] = None,
        predecessor: Optional[QThread] = None,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.source = source
        self.dest = dest
        self.extensions = extensions
        self.reporter = reporter
        self.generation = generation
        self.options = options or CopyOptions()
        self._predecessor = predecessor

        direct = Qt.ConnectionType.DirectConnection
        self.signals.finished.connect(self._on_finished, direct)
        self.signals.cancelled.connect(self._on_cancelled, direct)
        self.signals.failed.connect(self._on_failed, direct)

    def do_work(self) -> CopyProgress:
        """Run the copy engine and return its terminal state."""
        if self._predecessor is not None:
            self.report_status("Waiting for previous import to stop...")
            self._predecessor.wait()
            self._predecessor = None

        self.check_cancelled()

        self.report_status("Importing...")
        engine = CopyEngine(
            publish=self._publish,
            is_cancelled=lambda: self.is_cancelled,
            options=self.options,
        )
        return engine.run(self.source, self.dest, self.extensions)

    def _publish(self, value: CopyProgress) -> None:
        self.reporter.publish(value, self.generation)

    def _on_finished(self, result: CopyProgress) -> None:
        logging.info(f"CopyWorker - Import #{self.generation} ended: {result}")

    def _on_cancelled(self) -> None:
        # No-op when the engine already published its terminal state
        self._publish(Cancelled())

    def _on_failed(self, error_type: str, message: str) -> None:
        self._publish(Error(f"Error during copying: {message}"))


class FileCopyManager(QObject):
    """
    Entry point for callers: starts, supersedes and cancels imports.

    At most one import is active. Starting a new one cancels the current
    one; the new worker starts copying only after the old thread is done.
    All outcomes are reported through `progress`.
    """

    def __init__(
        self,
        options: Optional[CopyOptions] = None,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.options = options or CopyOptions()
        self.progress = ProgressReporter(self)
        self._thread: Optional[WorkerThread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.isRunning()

    def start_copying(
        self,
        source: Optional[DirectoryHandle],
        dest: Optional[DirectoryHandle],
        extensions: Iterable[str]
    ) -> None:
        """Start importing from `source` into `dest`. Returns immediately."""
        previous = self._thread
        if previous is not None:
            logging.info("FileCopyManager - Superseding previous import")
            previous.cancel()

        generation = self.progress.begin()
        worker = CopyWorker(
            source,
            dest,
            extensions,
            self.progress,
            generation,
            options=self.options,
            predecessor=previous if previous is not None and previous.isRunning() else None,
        )
        self._thread = WorkerThread(worker)
        logging.info(f"FileCopyManager - Starting import #{generation}")
        self._thread.start()

    def cancel(self) -> None:
        """Ask the current import to stop at its next checkpoint."""
        if self._thread is not None:
            logging.info("FileCopyManager - Cancelling import")
            self._thread.cancel()

    def wait(self, timeout_ms: Optional[int] = None) -> bool:
        """Block until the current import finishes. Returns False on timeout."""
        if self._thread is None:
            return True
        if timeout_ms is None:
            return self._thread.wait()
        return self._thread.wait(timeout_ms)
