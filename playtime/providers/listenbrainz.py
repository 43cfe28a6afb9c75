from __future__ import annotations

import logging
import urllib.parse
from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, NonNegativeInt, ValidationError

from ..config import ListenBrainzSettings
from ..http import Transport
from ..models import ParseError, Recording, TransportError

logger = logging.getLogger(__name__)


class _RecordingEntry(BaseModel):
    artist_name: str
    release_name: Optional[str] = None
    track_name: str
    recording_mbid: Optional[str] = None
    listen_count: NonNegativeInt

    def to_recording(self) -> Recording:
        return Recording(
            artist_name=self.artist_name,
            release_name=self.release_name or "",
            track_name=self.track_name,
            recording_id=self.recording_mbid or None,
            listen_count=self.listen_count,
        )


class _RecordingsPayload(BaseModel):
    recordings: List[_RecordingEntry]
    total_recording_count: Optional[int] = None


class _StatsResponse(BaseModel):
    payload: _RecordingsPayload


@dataclass(slots=True)
class RecordingPage:
    recordings: List[Recording]
    total_recording_count: Optional[int]


class ListenBrainzClient:
    def __init__(self, settings: ListenBrainzSettings, transport: Transport) -> None:
        self.settings = settings
        self.transport = transport

    def page_url(self, offset: int) -> str:
        params = urllib.parse.urlencode(
            {
                "count": self.settings.page_size,
                "offset": offset,
                "range": self.settings.range,
            }
        )
        user = urllib.parse.quote(self.settings.user, safe="")
        return f"{self.settings.base_url}/stats/user/{user}/recordings?{params}"

    def fetch_page(self, offset: int) -> RecordingPage:
        url = self.page_url(offset)
        response = self.transport.get(url)
        if response.status != 200:
            raise TransportError(f"ListenBrainz returned HTTP {response.status} for {url}")
        try:
            parsed = _StatsResponse.model_validate_json(response.body)
        except ValidationError as exc:
            raise ParseError(f"malformed ListenBrainz payload from {url}: {exc}") from exc
        return RecordingPage(
            recordings=[entry.to_recording() for entry in parsed.payload.recordings],
            total_recording_count=parsed.payload.total_recording_count,
        )

    def fetch_top_recordings(self, min_count: int) -> List[Recording]:
        """Collect at least ``min_count`` recordings, or all of them if fewer exist.

        Whole pages are kept, so the result may exceed ``min_count``.
        """
        recordings: List[Recording] = []
        offset = 0
        while len(recordings) < min_count:
            page = self.fetch_page(offset)
            if not page.recordings:
                logger.info("ListenBrainz history exhausted at %d recording(s)", len(recordings))
                break
            offset += len(page.recordings)
            recordings.extend(page.recordings)
            logger.info(
                "Request done, now at %d recording(s) (of %s)",
                len(recordings),
                page.total_recording_count if page.total_recording_count is not None else "?",
            )
        return recordings
