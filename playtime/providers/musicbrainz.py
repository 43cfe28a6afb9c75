from __future__ import annotations

import logging
import urllib.parse

from ..config import MusicBrainzSettings
from ..http import HttpResponse, Transport

logger = logging.getLogger(__name__)


class MusicBrainzClient:
    def __init__(self, settings: MusicBrainzSettings, transport: Transport) -> None:
        self.settings = settings
        self.transport = transport

    def recording_url(self, recording_id: str) -> str:
        quoted = urllib.parse.quote(recording_id, safe="")
        return f"{self.settings.base_url}/recording/{quoted}?fmt=json"

    def fetch_recording(self, recording_id: str) -> HttpResponse:
        url = self.recording_url(recording_id)
        logger.debug("Fetching MusicBrainz recording %s", url)
        return self.transport.get(url)
