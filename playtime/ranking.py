from __future__ import annotations

import logging
from typing import List, Sequence

from .models import EnrichedRecording

logger = logging.getLogger(__name__)


def rank(enriched: Sequence[EnrichedRecording]) -> List[EnrichedRecording]:
    """Order recordings by total listening time, longest first.

    Equal listening times fall back to artist, track, release and id so the
    result does not depend on input order. Raises ``ComputationError`` when a
    listening time overflows.
    """
    logger.info("Sorting %d recording(s) by play time", len(enriched))
    keyed = [(item.listening_time_ms, item) for item in enriched]
    keyed.sort(
        key=lambda pair: (
            -pair[0],
            pair[1].recording.artist_name,
            pair[1].recording.track_name,
            pair[1].recording.release_name,
            pair[1].recording_id,
        )
    )
    return [item for _, item in keyed]
