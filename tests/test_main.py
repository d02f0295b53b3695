"""
Tests for the command line front end.
"""

import unittest

from main import (
    EXIT_CANCELLED,
    EXIT_ERROR,
    EXIT_OK,
    CommandLineArgs,
    describe_progress,
    exit_code_for,
    format_time,
    parse_arguments,
    resolve_extensions,
)
from mediaimport.core.file_types import RAW_IMAGES, VIDEOS
from mediaimport.core.models import (
    Cancelled,
    Complete,
    Copying,
    Error,
    Ready,
    Scanning,
)


class TestParseArguments(unittest.TestCase):

    def test_positional_directories(self):
        args = parse_arguments(["/media/camera", "/home/me/Pictures"])

        self.assertEqual(args.source, "/media/camera")
        self.assertEqual(args.destination, "/home/me/Pictures")
        self.assertEqual(args.extensions, [])
        self.assertEqual(args.categories, [])
        self.assertIsNone(args.log_level)

    def test_repeated_and_comma_separated_extensions(self):
        args = parse_arguments(["-e", "jpg,png", "--ext", "heic", "src", "dst"])

        self.assertEqual(args.extensions, ["jpg", "png", "heic"])

    def test_options(self):
        args = parse_arguments([
            "-c", "raw", "--category", "videos",
            "--config", "cfg.json",
            "--log-level", "debug",
            "--log-file", "import.log",
            "src", "dst",
        ])

        self.assertEqual(args.categories, ["raw", "videos"])
        self.assertEqual(args.config_file, "cfg.json")
        self.assertEqual(args.log_level, "DEBUG")
        self.assertEqual(args.log_file, "import.log")

    def test_missing_destination_exits(self):
        with self.assertRaises(SystemExit):
            parse_arguments(["src"])


class TestResolveExtensions(unittest.TestCase):

    def test_defaults_used_when_nothing_selected(self):
        extensions = resolve_extensions(CommandLineArgs(), [".jpg", "PNG"])

        self.assertEqual(extensions, frozenset({".jpg", ".png"}))

    def test_explicit_extensions_replace_defaults(self):
        args = CommandLineArgs(extensions=["JPG", " .heic "])

        self.assertEqual(resolve_extensions(args, [".png"]), frozenset({".jpg", ".heic"}))

    def test_categories_combine_with_extensions(self):
        args = CommandLineArgs(extensions=["heic"], categories=["raw", "Videos"])

        extensions = resolve_extensions(args, [".png"])

        self.assertEqual(
            extensions,
            frozenset({".heic"}) | frozenset(RAW_IMAGES.extensions) | frozenset(VIDEOS.extensions),
        )

    def test_unknown_category(self):
        with self.assertRaises(ValueError):
            resolve_extensions(CommandLineArgs(categories=["documents"]), [])


class TestProgressText(unittest.TestCase):

    def test_format_time(self):
        self.assertEqual(format_time(0), "0s")
        self.assertEqual(format_time(59), "59s")
        self.assertEqual(format_time(75), "1m 15s")
        self.assertEqual(format_time(3725), "1h 2m")

    def test_describe_each_state(self):
        self.assertEqual(describe_progress(Scanning("Scanning source directory...")),
                         "Scanning source directory...")
        self.assertEqual(
            describe_progress(Ready(total_files=4, existing_files=2, files_to_copy=4)),
            "Ready: 4 to copy, 2 already present",
        )
        self.assertEqual(
            describe_progress(Complete(existing_files=2, files_to_copy=4)),
            "Complete: 4 copied, 2 already present",
        )
        self.assertEqual(describe_progress(Error("boom")), "Error: boom")
        self.assertEqual(describe_progress(Cancelled()), "Cancelled")

    def test_describe_copying(self):
        progress = Copying(
            current_file=1,
            total_files=4,
            progress=0.25,
            current_file_name="a.jpg",
            estimated_seconds_remaining=90,
            existing_files=0,
            files_to_copy=4,
        )

        self.assertEqual(describe_progress(progress), "[1/4]  25.0% a.jpg (about 1m 30s left)")

    def test_describe_copying_without_estimate(self):
        progress = Copying(
            current_file=4,
            total_files=4,
            progress=1.0,
            current_file_name="d.jpg",
            estimated_seconds_remaining=0,
            existing_files=0,
            files_to_copy=4,
        )

        self.assertEqual(describe_progress(progress), "[4/4] 100.0% d.jpg")

    def test_exit_codes(self):
        self.assertEqual(exit_code_for(Complete(existing_files=0, files_to_copy=0)), EXIT_OK)
        self.assertEqual(exit_code_for(Cancelled()), EXIT_CANCELLED)
        self.assertEqual(exit_code_for(Error("x")), EXIT_ERROR)
        self.assertEqual(exit_code_for(None), EXIT_ERROR)


if __name__ == '__main__':
    unittest.main()
