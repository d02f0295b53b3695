"""
Progress reporting for copy operations.

A single-slot, last-value-wins cell. The worker thread publishes; any
number of observers read the latest value and are told about changes,
either through the Qt `changed` signal or through plain callbacks.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PyQt6.QtCore import QMutex, QMutexLocker, QObject, pyqtSignal

from mediaimport.core.models import CopyProgress


ProgressObserver = Callable[[CopyProgress], None]


class ProgressReporter(QObject):
    """
    Holds the current CopyProgress of the active operation.

    Each operation publishes under the generation number returned by
    `begin()`. Values from superseded generations, and values following a
    terminal state, are dropped.
    """

    # Emitted with the new CopyProgress value
    changed = pyqtSignal(object)

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._mutex = QMutex()
        self._value: Optional[CopyProgress] = None
        self._generation = 0
        self._observers: list[ProgressObserver] = []

    @property
    def value(self) -> Optional[CopyProgress]:
        """The most recently published value, or None before any operation."""
        with QMutexLocker(self._mutex):
            return self._value

    @property
    def generation(self) -> int:
        with QMutexLocker(self._mutex):
            return self._generation

    def begin(self) -> int:
        """Start a new operation, superseding the previous one."""
        with QMutexLocker(self._mutex):
            self._generation += 1
            self._value = None
            return self._generation

    def publish(self, value: CopyProgress, generation: int) -> bool:
        """
        Publish a value for the operation `generation`.

        Returns False if the value was dropped.
        """
        with QMutexLocker(self._mutex):
            if generation != self._generation:
                logging.debug(f"ProgressReporter - Dropped {value} from superseded operation")
                return False
            if self._value is not None and self._value.is_terminal:
                logging.debug(f"ProgressReporter - Dropped {value} after terminal state")
                return False
            self._value = value
            observers = list(self._observers)

        self.changed.emit(value)
        for callback in observers:
            self._notify(callback, value)
        return True

    def subscribe(self, callback: ProgressObserver) -> None:
        """
        Observe progress changes.

        The callback runs on the publishing thread. It is called at once
        with the current value, if there is one.
        """
        with QMutexLocker(self._mutex):
            self._observers.append(callback)
            current = self._value

        if current is not None:
            self._notify(callback, current)

    def unsubscribe(self, callback: ProgressObserver) -> None:
        with QMutexLocker(self._mutex):
            if callback in self._observers:
                self._observers.remove(callback)

    def _notify(self, callback: ProgressObserver, value: CopyProgress) -> None:
        try:
            callback(value)
        except Exception:
            logging.exception("ProgressReporter - Progress observer failed")
