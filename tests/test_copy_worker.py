"""
Tests for the threaded import manager.
"""

import shutil
import tempfile
import threading
import unittest
from pathlib import Path

from PyQt6.QtCore import QCoreApplication

from mediaimport.core.copier import CopyOptions
from mediaimport.core.handles import LocalDirectoryHandle
from mediaimport.core.models import Cancelled, Complete, Copying, CopyState, Error
from mediaimport.services.progress import ProgressReporter
from mediaimport.workers.base_worker import WorkerState
from mediaimport.workers.copy_worker import CopyWorker, FileCopyManager

from tests.media_fixtures import MemoryDirectoryHandle, png_bytes, write_file


def setUpModule():
    global _app
    _app = QCoreApplication.instance() or QCoreApplication([])


class TestFileCopyManager(unittest.TestCase):
    """Test starting, superseding and cancelling imports."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, self.test_dir)
        self.source = self.test_dir / "source"
        self.dest = self.test_dir / "dest"
        self.dest.mkdir()
        for index in range(3):
            write_file(self.source / f"img{index}.png", png_bytes())

        self.manager = FileCopyManager(CopyOptions(buffer_size=1024))
        self.addCleanup(self.manager.wait)
        self.received = []
        self.manager.progress.subscribe(self.received.append)

    def start(self):
        self.manager.start_copying(
            LocalDirectoryHandle(self.source),
            LocalDirectoryHandle(self.dest),
            {".png"},
        )

    def test_import_completes(self):
        self.start()

        self.assertTrue(self.manager.wait(10000))
        self.assertFalse(self.manager.is_running)
        self.assertEqual(self.manager.progress.value, Complete(existing_files=0, files_to_copy=3))
        self.assertEqual(len(list(self.dest.iterdir())), 3)
        self.assertEqual(self.received[-1].state, CopyState.COMPLETE)

    def test_exactly_one_terminal_state(self):
        self.start()
        self.manager.wait(10000)

        terminal = [value for value in self.received if value.is_terminal]
        self.assertEqual(len(terminal), 1)
        self.assertIs(self.received[-1], terminal[0])

    def test_errors_are_reported_not_raised(self):
        self.manager.start_copying(None, LocalDirectoryHandle(self.dest), {".png"})

        self.assertTrue(self.manager.wait(10000))
        self.assertEqual(self.manager.progress.value, Error("Source directory is not accessible"))

    def test_new_import_supersedes_previous(self):
        self.start()
        self.start()

        self.assertTrue(self.manager.wait(10000))
        self.assertEqual(self.manager.progress.value.state, CopyState.COMPLETE)
        self.assertEqual(len(list(self.dest.iterdir())), 3)

    def test_cancel_stops_import(self):
        gate = threading.Event()
        dest = MemoryDirectoryHandle("dest")
        source = MemoryDirectoryHandle(
            "source",
            files={f"clip{index}.mp4": b"data" for index in range(5)},
        )

        def pause_on_first_copy(value):
            if isinstance(value, Copying) and value.current_file == 1:
                gate.wait(10)

        self.manager.progress.subscribe(pause_on_first_copy)
        self.manager.start_copying(source, dest, {".mp4"})
        self.manager.cancel()
        gate.set()

        self.assertTrue(self.manager.wait(10000))
        self.assertEqual(self.manager.progress.value, Cancelled())
        self.assertLess(len(dest.files), 5)

    def test_cancel_without_import_is_harmless(self):
        self.manager.cancel()

        self.assertTrue(self.manager.wait(100))
        self.assertIsNone(self.manager.progress.value)


class BrokenPredecessor:
    """Stands in for a previous import thread whose wait fails."""

    def wait(self):
        raise RuntimeError("previous import thread vanished")


class TestCopyWorker(unittest.TestCase):
    """Test how a worker run outside the engine ends up in the reporter."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, self.test_dir)
        write_file(self.test_dir / "source" / "img.png", png_bytes())
        (self.test_dir / "dest").mkdir()
        self.reporter = ProgressReporter()
        self.generation = self.reporter.begin()

    def make_worker(self, **kwargs):
        return CopyWorker(
            LocalDirectoryHandle(self.test_dir / "source"),
            LocalDirectoryHandle(self.test_dir / "dest"),
            {".png"},
            self.reporter,
            self.generation,
            **kwargs,
        )

    def test_finished_import_is_logged(self):
        worker = self.make_worker()

        with self.assertLogs(level='INFO') as logs:
            worker.run()

        self.assertEqual(worker.state, WorkerState.COMPLETED)
        self.assertEqual(self.reporter.value, Complete(existing_files=0, files_to_copy=1))
        self.assertTrue(any("ended" in line for line in logs.output))

    def test_cancelled_before_start_publishes_cancelled(self):
        worker = self.make_worker()
        worker.cancel()

        worker.run()

        self.assertEqual(worker.state, WorkerState.CANCELLED)
        self.assertEqual(self.reporter.value, Cancelled())
        self.assertEqual(list((self.test_dir / "dest").iterdir()), [])

    def test_failure_outside_engine_publishes_error(self):
        worker = self.make_worker(predecessor=BrokenPredecessor())

        with self.assertLogs(level='ERROR'):
            worker.run()

        self.assertEqual(worker.state, WorkerState.FAILED)
        self.assertEqual(
            self.reporter.value,
            Error("Error during copying: previous import thread vanished"),
        )


if __name__ == '__main__':
    unittest.main()
