import contextlib
import io
import logging
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from playtime import cli
from playtime.cache import DirectoryCache
from playtime.config import MusicBrainzSettings
from playtime.durations import DurationResolver
from playtime.models import EnrichedRecording, Recording, TransportError
from playtime.pipeline import PlaytimeReport
from playtime.providers.musicbrainz import MusicBrainzClient
from playtime.report import format_minutes, render_report


def _report() -> PlaytimeReport:
    song = Recording(
        artist_name="Artist",
        release_name="Album",
        track_name="Song",
        recording_id="id-song",
        listen_count=10,
    )
    orphan = Recording(artist_name="Other", release_name="Single", track_name="Lost", listen_count=2)
    return PlaytimeReport(
        ranked=[EnrichedRecording(recording=song, recording_id="id-song", duration_ms=100000)],
        unresolved=[orphan],
    )


def _reset_root_logger() -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        handler.close()
    root.handlers.clear()


class FakeApp:
    def __init__(self, report=None, error=None) -> None:
        self.report = report
        self.error = error
        self.closed = False
        self.counts: list[int] = []

    def run(self, min_count: int) -> PlaytimeReport:
        self.counts.append(min_count)
        if self.error:
            raise self.error
        return self.report

    def close(self) -> None:
        self.closed = True


class DirectoryCacheApp(FakeApp):
    def __init__(self, root: Path, recording_id: str) -> None:
        super().__init__()
        self.recording_id = recording_id
        self.resolver = DurationResolver(
            DirectoryCache(root), MusicBrainzClient(MusicBrainzSettings(), transport=None)
        )

    def run(self, min_count: int) -> PlaytimeReport:
        self.counts.append(min_count)
        self.resolver.resolve_duration(self.recording_id)
        return PlaytimeReport()


class TestRenderReport(unittest.TestCase):
    def test_renders_ranked_entries_and_unresolved(self) -> None:
        self.assertEqual(
            render_report(_report()),
            [
                "1. Artist - Song",
                "    from Album",
                "    minutes played: 16.67",
                "",
                "Unresolved: Other - Lost (Single)",
            ],
        )

    def test_format_minutes_trims_zeros(self) -> None:
        self.assertEqual(format_minutes(600000), "10")
        self.assertEqual(format_minutes(90000), "1.5")
        self.assertEqual(format_minutes(0), "0")


class TestConfigureLogging(unittest.TestCase):
    def setUp(self) -> None:
        self.addCleanup(_reset_root_logger)

    def test_installs_console_buffer_and_file_handlers(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            buffer = cli.configure_logging("debug", Path(tmpdir) / "warnings.log")
            root = logging.getLogger()
            self.assertEqual(root.level, logging.DEBUG)
            self.assertIn(buffer, root.handlers)
            self.assertEqual(len(root.handlers), 3)
            _reset_root_logger()

    def test_leaves_other_library_loggers_alone(self) -> None:
        def levels() -> dict:
            return {
                name: logger.level
                for name, logger in logging.Logger.manager.loggerDict.items()
                if isinstance(logger, logging.Logger) and logger.level != logging.NOTSET
            }

        before = levels()
        cli.configure_logging("info", None)
        self.assertEqual(levels(), before)


class TestMain(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.config = self.tmp / "config.yaml"
        self.config.write_text(
            "listenbrainz:\n  user: someone\nmusicbrainz:\n  useragent: playtime/0.1 ( me@liquidev.net )\n",
            encoding="utf-8",
        )
        self.addCleanup(self._tmp.cleanup)
        self.addCleanup(_reset_root_logger)

    def _argv(self, *extra: str) -> list[str]:
        return [
            "--count",
            "5",
            "--config",
            str(self.config),
            "--warnings-log",
            str(self.tmp / "warnings.log"),
            *extra,
        ]

    def test_prints_report_and_closes_app(self) -> None:
        app = FakeApp(report=_report())
        out = io.StringIO()
        with patch.object(cli.PlaytimeApp, "create", return_value=app), contextlib.redirect_stdout(out):
            cli.main(self._argv())

        self.assertEqual(app.counts, [5])
        self.assertTrue(app.closed)
        self.assertIn("1. Artist - Song", out.getvalue())

    def test_failure_prints_error_and_exits_nonzero(self) -> None:
        app = FakeApp(error=TransportError("ListenBrainz returned HTTP 500"))
        out = io.StringIO()
        with patch.object(cli.PlaytimeApp, "create", return_value=app), contextlib.redirect_stdout(out):
            with self.assertRaises(SystemExit) as ctx:
                cli.main(self._argv())

        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("error: ListenBrainz returned HTTP 500", out.getvalue())
        self.assertTrue(app.closed)

    def test_recording_id_with_slash_exits_with_error(self) -> None:
        app = DirectoryCacheApp(self.tmp / "musicbrainz_cache", "abc/def")
        out = io.StringIO()
        with patch.object(cli.PlaytimeApp, "create", return_value=app), contextlib.redirect_stdout(out):
            with self.assertRaises(SystemExit) as ctx:
                cli.main(self._argv())

        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("error: abc/def:", out.getvalue())
        self.assertTrue(app.closed)

    def test_missing_config_exits_nonzero(self) -> None:
        out = io.StringIO()
        argv = self._argv()
        argv[3] = str(self.tmp / "absent.yaml")
        with contextlib.redirect_stdout(out):
            with self.assertRaises(SystemExit) as ctx:
                cli.main(argv)

        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("error:", out.getvalue())

    def test_count_is_required(self) -> None:
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["--config", str(self.config)])
        self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
