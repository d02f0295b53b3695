"""
Tests for the progress reporter.
"""

import unittest

from PyQt6.QtCore import QCoreApplication

from mediaimport.core.models import Cancelled, Complete, Error, Ready, Scanning
from mediaimport.services.progress import ProgressReporter


def setUpModule():
    global _app
    _app = QCoreApplication.instance() or QCoreApplication([])


class TestProgressReporter(unittest.TestCase):
    """Test the single-slot progress cell."""

    def setUp(self):
        self.reporter = ProgressReporter()
        self.generation = self.reporter.begin()

    def test_last_value_wins(self):
        self.reporter.publish(Scanning("one"), self.generation)
        self.reporter.publish(Scanning("two"), self.generation)

        self.assertEqual(self.reporter.value, Scanning("two"))

    def test_late_subscriber_receives_current_value(self):
        self.reporter.publish(Ready(total_files=3, existing_files=1, files_to_copy=3), self.generation)
        received = []

        self.reporter.subscribe(received.append)
        self.reporter.publish(Complete(existing_files=1, files_to_copy=3), self.generation)

        self.assertEqual(
            received,
            [
                Ready(total_files=3, existing_files=1, files_to_copy=3),
                Complete(existing_files=1, files_to_copy=3),
            ],
        )

    def test_subscriber_before_any_value_is_not_called(self):
        received = []
        self.reporter.subscribe(received.append)

        self.assertEqual(received, [])

    def test_nothing_published_after_terminal_state(self):
        received = []
        self.reporter.subscribe(received.append)

        self.assertTrue(self.reporter.publish(Cancelled(), self.generation))
        self.assertFalse(self.reporter.publish(Scanning("late"), self.generation))
        self.assertFalse(self.reporter.publish(Error("late"), self.generation))

        self.assertEqual(received, [Cancelled()])
        self.assertEqual(self.reporter.value, Cancelled())

    def test_superseded_operation_is_ignored(self):
        self.reporter.publish(Scanning("old"), self.generation)
        newer = self.reporter.begin()

        self.assertIsNone(self.reporter.value)
        self.assertFalse(self.reporter.publish(Complete(existing_files=0, files_to_copy=1), self.generation))
        self.assertTrue(self.reporter.publish(Scanning("new"), newer))
        self.assertEqual(self.reporter.value, Scanning("new"))

    def test_new_operation_may_publish_after_previous_terminal(self):
        self.reporter.publish(Error("boom"), self.generation)
        newer = self.reporter.begin()

        self.assertTrue(self.reporter.publish(Scanning("again"), newer))

    def test_failing_observer_does_not_break_publishing(self):
        received = []

        def broken(value):
            raise RuntimeError("observer bug")

        self.reporter.subscribe(broken)
        self.reporter.subscribe(received.append)

        with self.assertLogs(level='ERROR'):
            self.reporter.publish(Scanning("x"), self.generation)

        self.assertEqual(received, [Scanning("x")])

    def test_unsubscribe(self):
        received = []
        self.reporter.subscribe(received.append)
        self.reporter.unsubscribe(received.append)

        self.reporter.publish(Scanning("x"), self.generation)

        self.assertEqual(received, [])

    def test_qt_signal_emitted(self):
        received = []
        self.reporter.changed.connect(received.append)

        self.reporter.publish(Scanning("x"), self.generation)

        self.assertEqual(received, [Scanning("x")])


if __name__ == '__main__':
    unittest.main()
