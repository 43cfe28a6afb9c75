from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from .durations import DurationResolver
from .identity import resolve
from .models import EnrichedRecording, Id, Recording, Skip
from .providers.listenbrainz import ListenBrainzClient
from .ranking import rank
from .rules import OverrideRules

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PlaytimeReport:
    ranked: List[EnrichedRecording] = field(default_factory=list)
    skipped: List[Recording] = field(default_factory=list)
    unresolved: List[Recording] = field(default_factory=list)


class ReportPipeline:
    def __init__(
        self,
        history: ListenBrainzClient,
        durations: DurationResolver,
        rules: OverrideRules,
    ) -> None:
        self.history = history
        self.durations = durations
        self.rules = rules

    def run(self, min_count: int) -> PlaytimeReport:
        report = PlaytimeReport()
        recordings = self.history.fetch_top_recordings(min_count)
        enriched: List[EnrichedRecording] = []
        for recording in recordings:
            identity = resolve(recording, self.rules.skip, self.rules.remap)
            if isinstance(identity, Skip):
                logger.info("Skipping %s", recording.describe())
                report.skipped.append(recording)
                continue
            if not isinstance(identity, Id):
                logger.warning("Recording does not have a valid MBID: %s", recording.describe())
                report.unresolved.append(recording)
                continue
            duration_ms = self.durations.resolve_duration(identity.value)
            enriched.append(
                EnrichedRecording(
                    recording=recording,
                    recording_id=identity.value,
                    duration_ms=duration_ms,
                )
            )
        report.ranked = rank(enriched)
        return report
