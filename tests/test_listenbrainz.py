import json
import unittest
from urllib.parse import parse_qs, urlparse

from playtime.config import ListenBrainzSettings
from playtime.http import HttpResponse
from playtime.models import ParseError, Recording, TransportError
from playtime.providers.listenbrainz import ListenBrainzClient


def _entry(n: int, mbid="auto") -> dict:
    return {
        "artist_name": f"Artist {n}",
        "release_name": f"Release {n}",
        "track_name": f"Track {n}",
        "recording_mbid": f"mbid-{n}" if mbid == "auto" else mbid,
        "listen_count": 1000 - n,
    }


def _page(entries: list[dict], total: int = 250) -> tuple[int, bytes]:
    payload = {"payload": {"recordings": entries, "total_recording_count": total}}
    return 200, json.dumps(payload).encode("utf-8")


class PagedTransport:
    def __init__(self, responses: list) -> None:
        self.responses = list(responses)
        self.urls: list[str] = []

    def get(self, url: str) -> HttpResponse:
        self.urls.append(url)
        status, body = self.responses.pop(0)
        return HttpResponse(url=url, status=status, body=body)

    def offsets(self) -> list[int]:
        return [int(parse_qs(urlparse(url).query)["offset"][0]) for url in self.urls]


class TestListenBrainzClient(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = ListenBrainzSettings(user="liquidev", range="this_year")

    def test_page_url_carries_count_offset_and_range(self) -> None:
        client = ListenBrainzClient(self.settings, PagedTransport([]))
        url = urlparse(client.page_url(200))
        self.assertEqual(url.path, "/1/stats/user/liquidev/recordings")
        self.assertEqual(
            parse_qs(url.query), {"count": ["100"], "offset": ["200"], "range": ["this_year"]}
        )

    def test_advances_offset_by_page_length_until_count_reached(self) -> None:
        transport = PagedTransport(
            [
                _page([_entry(n) for n in range(100)]),
                _page([_entry(n) for n in range(100, 170)]),
                _page([_entry(n) for n in range(170, 250)]),
            ]
        )
        client = ListenBrainzClient(self.settings, transport)

        recordings = client.fetch_top_recordings(min_count=150)

        self.assertEqual(transport.offsets(), [0, 100])
        self.assertEqual(len(recordings), 170)
        self.assertEqual(recordings[0].track_name, "Track 0")
        self.assertEqual(recordings[-1].track_name, "Track 169")

    def test_stops_when_history_is_exhausted(self) -> None:
        transport = PagedTransport([_page([_entry(0), _entry(1)], total=2), _page([], total=2)])
        client = ListenBrainzClient(self.settings, transport)

        recordings = client.fetch_top_recordings(min_count=500)

        self.assertEqual(transport.offsets(), [0, 2])
        self.assertEqual(len(recordings), 2)

    def test_zero_count_makes_no_request(self) -> None:
        transport = PagedTransport([])
        client = ListenBrainzClient(self.settings, transport)
        self.assertEqual(client.fetch_top_recordings(0), [])
        self.assertEqual(transport.urls, [])

    def test_maps_payload_into_recordings(self) -> None:
        transport = PagedTransport([_page([_entry(1, mbid=None), _entry(2, mbid="")])])
        client = ListenBrainzClient(self.settings, transport)

        recordings = client.fetch_top_recordings(min_count=2)

        self.assertEqual(
            recordings[0],
            Recording(
                artist_name="Artist 1",
                release_name="Release 1",
                track_name="Track 1",
                recording_id=None,
                listen_count=999,
            ),
        )
        self.assertIsNone(recordings[1].recording_id)

    def test_error_status_aborts_fetch(self) -> None:
        transport = PagedTransport([_page([_entry(0)]), (500, b"oops")])
        client = ListenBrainzClient(self.settings, transport)
        with self.assertRaises(TransportError):
            client.fetch_top_recordings(min_count=10)

    def test_malformed_payload_is_parse_error(self) -> None:
        transport = PagedTransport([(200, b"{not json")])
        client = ListenBrainzClient(self.settings, transport)
        with self.assertRaises(ParseError):
            client.fetch_top_recordings(min_count=10)

    def test_wrong_payload_shape_is_parse_error(self) -> None:
        transport = PagedTransport([(200, json.dumps({"payload": {"recordings": [{"artist_name": "x"}]}}).encode())])
        client = ListenBrainzClient(self.settings, transport)
        with self.assertRaises(ParseError):
            client.fetch_top_recordings(min_count=10)

    def test_parse_error_is_a_transport_error(self) -> None:
        self.assertTrue(issubclass(ParseError, TransportError))


if __name__ == "__main__":
    unittest.main()
