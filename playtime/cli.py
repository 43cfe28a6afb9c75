from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from .app import PlaytimeApp
from .config import Settings, find_config
from .models import PlaytimeError
from .providers.validation import validate_providers
from .report import render_report

LOG_FORMAT = "%(levelname).1s | %(name)s | %(message)s"

C_RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",  # Cyan
    logging.INFO: "\033[37m",  # Light gray
    logging.WARNING: "\033[33m",  # Yellow
    logging.ERROR: "\033[31m",  # Red
    logging.CRITICAL: "\033[35m",  # Magenta
}


class ColorFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not color:
            return message
        return f"{color}{message}{C_RESET}"


class WarningBufferHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)
        self.records: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:  # pragma: no cover
            msg = record.getMessage()
        self.records.append(msg)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Rank a ListenBrainz user's recordings by total listening time"
    )
    parser.add_argument(
        "-c",
        "--count",
        type=int,
        required=True,
        help="Minimum number of top recordings to fetch from ListenBrainz",
    )
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    parser.add_argument("--log-level", default="INFO", help="Python logging level")
    parser.add_argument(
        "--warnings-log",
        type=Path,
        default=Path.cwd() / "playtime-warnings.log",
        help="File that receives warnings and errors from this run",
    )
    return parser


def configure_logging(log_level: str, warn_log_path: Optional[Path]) -> WarningBufferHandler:
    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    color_handler = logging.StreamHandler()
    color_handler.setFormatter(ColorFormatter(LOG_FORMAT))
    root_logger.addHandler(color_handler)

    warn_buffer = WarningBufferHandler()
    warn_buffer.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(warn_buffer)

    if warn_log_path is not None:
        file_handler = logging.FileHandler(warn_log_path, mode="w", encoding="utf-8")
        file_handler.setLevel(logging.WARNING)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(file_handler)

    return warn_buffer


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.count < 0:
        parser.error("--count must be non-negative")
    warn_buffer = configure_logging(args.log_level, args.warnings_log)
    app: PlaytimeApp | None = None
    try:
        settings = Settings.load(find_config(args.config))
        validate_providers(settings)
        app = PlaytimeApp.create(settings)
        report = app.run(args.count)
        for line in render_report(report):
            print(line)
    except PlaytimeError as exc:
        print(f"error: {exc}")
        raise SystemExit(1) from exc
    finally:
        if app:
            app.close()
        if warn_buffer.records:
            print("\n\033[33mWarnings/Errors summary:\033[0m")
            for line in warn_buffer.records:
                print(f" - {line}")
            if args.warnings_log is not None:
                print(f"\nFull warning log: {args.warnings_log}")


if __name__ == "__main__":
    main()
