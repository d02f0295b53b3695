"""
Tests for the worker base class.
"""

import unittest

from PyQt6.QtCore import QCoreApplication

from mediaimport.workers.base_worker import BaseWorker, WorkerState, WorkerThread


def setUpModule():
    global _app
    _app = QCoreApplication.instance() or QCoreApplication([])


class StepWorker(BaseWorker):
    """Counts steps, stopping through check_cancelled."""

    def __init__(self, steps=3, fail_at=None, cancel_at=None):
        super().__init__()
        self.steps = steps
        self.fail_at = fail_at
        self.cancel_at = cancel_at
        self.done = 0

    def do_work(self):
        for step in range(self.steps):
            if step == self.cancel_at:
                self.cancel()
            self.check_cancelled()
            if step == self.fail_at:
                raise OSError("disk gone")
            self.done += 1
        return self.done


class TestBaseWorker(unittest.TestCase):

    def test_completes_with_result(self):
        worker = StepWorker()
        finished = []
        worker.signals.finished.connect(finished.append)

        worker.run()

        self.assertEqual(worker.state, WorkerState.COMPLETED)
        self.assertEqual(worker.result, 3)
        self.assertEqual(finished, [3])

    def test_check_cancelled_stops_work(self):
        worker = StepWorker(cancel_at=1)
        cancelled = []
        worker.signals.cancelled.connect(lambda: cancelled.append(True))

        worker.run()

        self.assertEqual(worker.state, WorkerState.CANCELLED)
        self.assertEqual(worker.done, 1)
        self.assertEqual(cancelled, [True])

    def test_failure_is_recorded(self):
        worker = StepWorker(fail_at=2)

        with self.assertLogs(level='ERROR'):
            worker.run()

        self.assertEqual(worker.state, WorkerState.FAILED)
        self.assertEqual(worker.error, ("OSError", "disk gone"))

    def test_thread_runs_worker(self):
        thread = WorkerThread(StepWorker(steps=5))

        thread.start()

        self.assertTrue(thread.wait(5000))
        self.assertEqual(thread.result, 5)
        self.assertIsNone(thread.error)


if __name__ == '__main__':
    unittest.main()
