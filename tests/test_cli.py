"""Tests for argument parsing and the --once mode of the CLI.

The collector is patched so nothing touches the host.
Run with:  python -m pytest tests/  or  python -m unittest discover tests/
"""

import contextlib
import io
import json
import os
import unittest
import unittest.mock as mock
from pathlib import Path

from diskinfo import __version__, cli
from diskinfo.collectors import PsutilDiskSource
from diskinfo.collectors.disk_usage import build_record
from diskinfo.config import LOG_LEVELS
from diskinfo.models.schema import CollectionResult

from fakes import sample

PATCH_COLLECT = "diskinfo.cli.collect_detailed"
PATCH_SYSTEM_CONFIG = "diskinfo.config.settings._SYSTEM_CONFIG"


def _result() -> CollectionResult:
    return CollectionResult(records=[build_record("/dev/sda1", "/", "ext4", sample(4096, 1024))])


class TestParseArgs(unittest.TestCase):
    def test_defaults(self):
        args = cli.parse_args([])
        self.assertIsNone(args.ignore_types)
        self.assertFalse(args.once)
        self.assertEqual(args.format, "json")

    def test_repeatable_ignore_type(self):
        args = cli.parse_args(["-i", "tmpfs", "--ignore-type", "cdrom"])
        self.assertEqual(args.ignore_types, ["tmpfs", "cdrom"])

    def test_short_host_proc(self):
        self.assertEqual(cli.parse_args(["-p", "/host/proc"]).host_proc, "/host/proc")

    def test_log_level_choices_match_config(self):
        self.assertEqual(cli.parse_args(["--log-level", "critical"]).log_level, "critical")
        for level in LOG_LEVELS:
            with self.subTest(level=level):
                self.assertEqual(cli.parse_args(["--log-level", level]).log_level, level)

    def test_version(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out), self.assertRaises(SystemExit) as cm:
            cli.parse_args(["--version"])
        self.assertEqual(cm.exception.code, 0)
        self.assertIn(__version__, out.getvalue())


class TestRun(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch(PATCH_SYSTEM_CONFIG, Path("/nonexistent/diskinfo.yaml"))
        patcher.start()
        self.addCleanup(patcher.stop)
        env = mock.patch.dict(os.environ, {}, clear=True)
        env.start()
        self.addCleanup(env.stop)

    def _run(self, argv) -> str:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            cli.run(argv)
        return out.getvalue()

    def test_once_json(self):
        with mock.patch(PATCH_COLLECT, return_value=_result()) as collect:
            data = json.loads(self._run(["--once", "-i", "tmpfs"]))
        self.assertEqual(data["records"][0]["human_size"], "4.0 KB")
        self.assertEqual(collect.call_args.args[0], ["tmpfs"])

    def test_once_table(self):
        with mock.patch(PATCH_COLLECT, return_value=_result()):
            out = self._run(["--once", "--format", "table"])
        self.assertIn("25.0%", out)
        self.assertIn("75.0%", out)

    def test_host_proc_passed_to_source(self):
        with mock.patch(PATCH_COLLECT, return_value=CollectionResult()) as collect:
            self._run(["--once", "-p", "/host/proc"])
        source = collect.call_args.kwargs["source"]
        self.assertIsInstance(source, PsutilDiskSource)
        self.assertEqual(source.mounts_file, "/host/proc/1/mounts")

    def test_default_source_uses_psutil_enumeration(self):
        with mock.patch(PATCH_COLLECT, return_value=CollectionResult()) as collect:
            self._run(["--once"])
        self.assertIsNone(collect.call_args.kwargs["source"].mounts_file)

    def test_host_prefix_and_timeout_passed_through(self):
        with mock.patch(PATCH_COLLECT, return_value=CollectionResult()) as collect:
            self._run(["--once", "--host-prefix", "/host", "--usage-timeout", "1.5"])
        self.assertEqual(collect.call_args.kwargs["host_prefix"], "/host")
        self.assertEqual(collect.call_args.kwargs["timeout"], 1.5)

    def test_config_error_exits_2(self):
        err = io.StringIO()
        with contextlib.redirect_stderr(err), self.assertRaises(SystemExit) as cm:
            cli.run(["--config", "/nonexistent/config.yaml", "--once"])
        self.assertEqual(cm.exception.code, 2)
        self.assertIn("Config file not found", err.getvalue())

    def test_serve_mode(self):
        with mock.patch("diskinfo.cli.serve") as serve:
            cli.run(["--port", "9123", "-i", "tmpfs"])
        settings = serve.call_args.args[0]
        self.assertEqual(settings.port, 9123)
        self.assertEqual(settings.ignore_types, ["tmpfs"])

    def test_serve_runs_uvicorn_with_graceful_shutdown(self):
        with mock.patch("uvicorn.run") as uv_run:
            cli.run(["--host", "127.0.0.1", "--port", "9124"])
        kwargs = uv_run.call_args.kwargs
        self.assertEqual(kwargs["host"], "127.0.0.1")
        self.assertEqual(kwargs["port"], 9124)
        self.assertEqual(kwargs["timeout_graceful_shutdown"], 5)


if __name__ == "__main__":
    unittest.main()
