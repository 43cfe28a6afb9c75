from __future__ import annotations

import logging

from ..config import Settings
from ..models import ConfigError

logger = logging.getLogger(__name__)


def validate_providers(settings: Settings) -> None:
    errors: list[str] = []
    try:
        _validate_listenbrainz(settings.listenbrainz.user)
    except ConfigError as exc:
        errors.append(f"ListenBrainz settings invalid: {exc}")
    try:
        _validate_musicbrainz(settings.musicbrainz.useragent)
    except ConfigError as exc:
        errors.append(f"MusicBrainz settings invalid: {exc}")
    if errors:
        message = "\n".join(errors)
        raise ConfigError(f"Provider validation failed:\n{message}")


def _validate_listenbrainz(user: str) -> None:
    if not user or not user.strip():
        raise ConfigError("listenbrainz.user must name the account to report on")


def _validate_musicbrainz(useragent: str) -> None:
    if not useragent or "example.com" in useragent:
        raise ConfigError("musicbrainz.useragent must include a real contact (e.g. email or URL)")
    logger.debug("MusicBrainz user agent: %s", useragent)
