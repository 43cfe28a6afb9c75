from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Optional, Union

MAX_LISTENING_TIME_MS = sys.maxsize


@dataclass(frozen=True, slots=True)
class Recording:
    artist_name: str
    release_name: str
    track_name: str
    recording_id: Optional[str] = None
    listen_count: int = 0

    def __post_init__(self) -> None:
        if self.listen_count < 0:
            raise ValueError(f"listen_count must be non-negative, got {self.listen_count}")
        if self.recording_id == "":
            object.__setattr__(self, "recording_id", None)

    def describe(self) -> str:
        return f"{self.artist_name} - {self.track_name} ({self.release_name})"


@dataclass(frozen=True, slots=True)
class EnrichedRecording:
    recording: Recording
    recording_id: str
    duration_ms: int

    @property
    def listening_time_ms(self) -> int:
        total = self.recording.listen_count * self.duration_ms
        if total > MAX_LISTENING_TIME_MS:
            raise ComputationError(
                f"listening time overflows for {self.recording.describe()}: "
                f"{self.recording.listen_count} x {self.duration_ms} ms"
            )
        return total


@dataclass(frozen=True, slots=True)
class Skip:
    pass


@dataclass(frozen=True, slots=True)
class Unresolvable:
    pass


@dataclass(frozen=True, slots=True)
class Id:
    value: str


ResolvedIdentity = Union[Skip, Unresolvable, Id]


class PlaytimeError(Exception):
    """Base class for failures that abort a report run."""


class TransportError(PlaytimeError):
    """Raised when a service request fails or returns an unusable status."""


class ParseError(TransportError):
    """Raised when a service payload is not valid JSON or has the wrong shape."""


class MetadataError(PlaytimeError):
    def __init__(self, recording_id: str, message: str) -> None:
        super().__init__(f"{recording_id}: {message}")
        self.recording_id = recording_id


class ComputationError(PlaytimeError):
    pass


class ConfigError(PlaytimeError):
    """Raised when settings or override files are missing or malformed."""
