from __future__ import annotations

from .listenbrainz import ListenBrainzClient
from .musicbrainz import MusicBrainzClient

__all__ = ["ListenBrainzClient", "MusicBrainzClient"]
