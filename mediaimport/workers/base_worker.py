"""
Worker base for long-running imports.

A worker owns one unit of work (`do_work`) plus the bookkeeping around it:
a cancellation flag the work polls, the final result or error, and a small
set of Qt signals for callers living on the main thread.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Any, Optional

from PyQt6.QtCore import QObject, QThread, QMutex, QMutexLocker, pyqtSignal


class WorkerState(Enum):
    """Lifecycle of a worker."""
    PENDING = auto()
    RUNNING = auto()
    CANCELLING = auto()
    CANCELLED = auto()
    COMPLETED = auto()
    FAILED = auto()


class WorkerSignals(QObject):
    """Signals a worker emits from its own thread."""
    # Free-form status line
    status = pyqtSignal(str)

    # Result of do_work
    finished = pyqtSignal(object)

    # (exception type name, message)
    failed = pyqtSignal(str, str)

    cancelled = pyqtSignal()


class CancelledException(Exception):
    """Raised from check_cancelled to unwind a cancelled worker."""
    pass


class WorkerMeta(type(QObject), type(ABC)):
    pass


class BaseWorker(QObject, ABC, metaclass=WorkerMeta):
    """
    Base class for workers run by a WorkerThread.

    Subclasses implement `do_work` and poll `is_cancelled` (or call
    `check_cancelled`) at points where stopping is safe.
    """

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.signals = WorkerSignals()
        self._mutex = QMutex()
        self._state = WorkerState.PENDING
        self._cancel_requested = False
        self._result: Any = None
        self._error: Optional[tuple[str, str]] = None

    @property
    def state(self) -> WorkerState:
        with QMutexLocker(self._mutex):
            return self._state

    def _set_state(self, state: WorkerState) -> None:
        with QMutexLocker(self._mutex):
            self._state = state
        logging.debug(f"{type(self).__name__} - {state.name}")

    @property
    def is_cancelled(self) -> bool:
        with QMutexLocker(self._mutex):
            return self._cancel_requested

    @property
    def result(self) -> Any:
        return self._result

    @property
    def error(self) -> Optional[tuple[str, str]]:
        return self._error

    def cancel(self) -> None:
        """Ask the work to stop at its next checkpoint. Safe from any thread."""
        with QMutexLocker(self._mutex):
            self._cancel_requested = True
            if self._state == WorkerState.RUNNING:
                self._state = WorkerState.CANCELLING

    def run(self) -> None:
        """Run `do_work` once and record how it ended."""
        self._set_state(WorkerState.RUNNING)

        try:
            self._result = self.do_work()
        except CancelledException:
            self._set_state(WorkerState.CANCELLED)
            self.signals.cancelled.emit()
            return
        except Exception as e:
            logging.exception(f"{type(self).__name__} - Worker failed")
            self._error = (type(e).__name__, str(e))
            self._set_state(WorkerState.FAILED)
            self.signals.failed.emit(*self._error)
            return

        if self.is_cancelled:
            self._set_state(WorkerState.CANCELLED)
            self.signals.cancelled.emit()
        else:
            self._set_state(WorkerState.COMPLETED)
            self.signals.finished.emit(self._result)

    @abstractmethod
    def do_work(self) -> Any:
        """Do the work and return its result."""

    def report_status(self, message: str) -> None:
        logging.info(f"{type(self).__name__} - {message}")
        self.signals.status.emit(message)

    def check_cancelled(self) -> None:
        """Raise CancelledException if cancellation was requested."""
        if self.is_cancelled:
            raise CancelledException("Operation cancelled")


class WorkerThread(QThread):
    """
    Dedicated thread for one worker.

    `run` calls the worker directly, so no event loop is needed in the
    thread and `wait()` returning means the work is over.
    """

    def __init__(self, worker: BaseWorker, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.worker = worker

    def run(self) -> None:
        self.worker.run()

    def cancel(self) -> None:
        self.worker.cancel()

    @property
    def result(self) -> Any:
        return self.worker.result

    @property
    def error(self) -> Optional[tuple[str, str]]:
        return self.worker.error
