from __future__ import annotations

import http.client
import logging
import socket
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Protocol

from .models import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HttpResponse:
    url: str
    status: int
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    def get(self, url: str) -> HttpResponse: ...


class UrllibTransport:
    """GET over urllib; HTTP error statuses are returned, not raised."""

    def __init__(self, useragent: str, timeout: float = 10.0) -> None:
        self.useragent = useragent
        self.timeout = timeout

    def get(self, url: str) -> HttpResponse:
        req = urllib.request.Request(
            url,
            headers={"User-Agent": self.useragent, "Accept": "application/json"},
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                return HttpResponse(url=url, status=resp.status, body=resp.read())
        except urllib.error.HTTPError as exc:
            logger.debug("HTTP %s for %s", exc.code, url)
            body = exc.read() if exc.fp is not None else b""
            return HttpResponse(url=url, status=exc.code, body=body)
        except (
            socket.gaierror,
            urllib.error.URLError,
            http.client.HTTPException,
            TimeoutError,
            ConnectionError,
        ) as exc:
            raise TransportError(f"request to {url} failed: {exc}") from exc
