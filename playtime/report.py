from __future__ import annotations

from typing import List

from .pipeline import PlaytimeReport

MS_PER_MINUTE = 60000


def format_minutes(listening_time_ms: int) -> str:
    text = f"{listening_time_ms / MS_PER_MINUTE:.2f}"
    return text.rstrip("0").rstrip(".")


def render_report(report: PlaytimeReport) -> List[str]:
    lines: List[str] = []
    for index, entry in enumerate(report.ranked, start=1):
        recording = entry.recording
        lines.append(f"{index}. {recording.artist_name} - {recording.track_name}")
        lines.append(f"    from {recording.release_name}")
        lines.append(f"    minutes played: {format_minutes(entry.listening_time_ms)}")
        lines.append("")
    for recording in report.unresolved:
        lines.append(f"Unresolved: {recording.describe()}")
    return lines
