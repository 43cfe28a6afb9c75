from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, NonNegativeInt, ValidationError

from .cache import DurationCache
from .models import MetadataError
from .providers.musicbrainz import MusicBrainzClient
from .ratelimit import RateLimitRetryPolicy

logger = logging.getLogger(__name__)


class _RecordingLength(BaseModel):
    length: Optional[NonNegativeInt] = None


def parse_length(recording_id: str, body: bytes) -> int:
    try:
        parsed = _RecordingLength.model_validate_json(body)
    except ValidationError as exc:
        raise MetadataError(recording_id, f"malformed MusicBrainz payload: {exc}") from exc
    if parsed.length is None:
        raise MetadataError(recording_id, "MusicBrainz recording has no length")
    return parsed.length


class DurationResolver:
    def __init__(
        self,
        cache: DurationCache,
        client: MusicBrainzClient,
        policy: Optional[RateLimitRetryPolicy] = None,
    ) -> None:
        self.cache = cache
        self.client = client
        self.policy = policy or RateLimitRetryPolicy()

    def resolve_duration(self, recording_id: str) -> int:
        cached = self.cache.get(recording_id)
        if cached is not None:
            logger.debug("MusicBrainz cache hit for recording %s", recording_id)
            return parse_length(recording_id, cached)
        logger.info("Getting length of %s from MusicBrainz", recording_id)
        body = self._fetch(recording_id)
        return parse_length(recording_id, body)

    def _fetch(self, recording_id: str) -> bytes:
        clock = self.policy.clock
        while True:
            started = clock.monotonic()
            response = self.client.fetch_recording(recording_id)
            self.policy.pace(clock.monotonic() - started)
            if self.policy.is_retryable(response):
                logger.warning(
                    "MusicBrainz rate limited (HTTP %s) for %s; retrying",
                    response.status,
                    response.url,
                )
                continue
            if not response.ok:
                raise MetadataError(
                    recording_id,
                    f"MusicBrainz returned HTTP {response.status} for {response.url}",
                )
            self.cache.put(recording_id, response.body)
            return response.body
