from __future__ import annotations

from dataclasses import dataclass

from .cache import DurationCache, open_cache
from .config import Settings
from .durations import DurationResolver
from .http import UrllibTransport
from .pipeline import PlaytimeReport, ReportPipeline
from .providers.listenbrainz import ListenBrainzClient
from .providers.musicbrainz import MusicBrainzClient
from .ratelimit import RateLimitRetryPolicy
from .rules import OverrideRules


@dataclass
class PlaytimeApp:
    settings: Settings
    cache: DurationCache
    rules: OverrideRules
    listenbrainz: ListenBrainzClient
    musicbrainz: MusicBrainzClient
    durations: DurationResolver

    @classmethod
    def create(cls, settings: Settings) -> "PlaytimeApp":
        rules = OverrideRules.load(settings.overrides.skip_path, settings.overrides.remap_path)
        cache = open_cache(settings.cache.backend, settings.cache.path)
        listenbrainz = ListenBrainzClient(
            settings.listenbrainz,
            UrllibTransport(settings.listenbrainz.useragent, timeout=settings.timeout_seconds),
        )
        musicbrainz = MusicBrainzClient(
            settings.musicbrainz,
            UrllibTransport(settings.musicbrainz.useragent, timeout=settings.timeout_seconds),
        )
        policy = RateLimitRetryPolicy(
            min_interval=settings.musicbrainz.min_request_interval_seconds,
            retry_statuses=settings.musicbrainz.retry_statuses,
        )
        return cls(
            settings=settings,
            cache=cache,
            rules=rules,
            listenbrainz=listenbrainz,
            musicbrainz=musicbrainz,
            durations=DurationResolver(cache, musicbrainz, policy),
        )

    def run(self, min_count: int) -> PlaytimeReport:
        pipeline = ReportPipeline(self.listenbrainz, self.durations, self.rules)
        return pipeline.run(min_count)

    def close(self) -> None:
        self.cache.close()
