import pytest

from douyin_import.douyin import ROUTER_DATA_MARKER, load_douyin_playlist, parse_playlist
from douyin_import.errors import MarkerNotFound
from douyin_import.types import Track


def media(kind, name, *artists):
    return {"type": kind, "entity": {"track": {"name": name, "artists": [{"name": a} for a in artists]}}}


def doc(*medias):
    return {"loaderData": {"playlist_page": {"medias": list(medias)}}}


PAGE = (
    '<script>_ROUTER_DATA = {"loaderData":{"playlist_page":{"medias":[{"type":"track",'
    '"entity":{"track":{"name":"Song A","artists":[{"name":"Artist X"}]}}}]}}};</script>'
)


def test_parse_single_track_from_page():
    tracks = load_douyin_playlist("https://example.test", fetch=lambda url: PAGE)
    assert tracks == [Track(title="Song A", artist="Artist X")]


def test_parse_skips_non_track_media():
    assert parse_playlist(doc(media("ad", "Buy now", "Sponsor"))) == []


def test_parse_keeps_order_and_joins_artists():
    tracks = parse_playlist(
        doc(
            media("track", "One", "A", "B"),
            media("banner", "x"),
            media("track", "Two"),
            media("track", "Three", "C"),
        )
    )
    assert tracks == [
        Track("One", "A, B"),
        Track("Two", ""),
        Track("Three", "C"),
    ]


@pytest.mark.parametrize(
    "document",
    [
        {},
        {"loaderData": {}},
        {"loaderData": {"playlist_page": {}}},
        {"loaderData": {"playlist_page": {"medias": None}}},
        {"loaderData": {"playlist_page": {"medias": []}}},
        [],
    ],
)
def test_parse_missing_path_is_empty(document):
    assert parse_playlist(document) == []


def test_parse_tolerates_missing_track_fields():
    tracks = parse_playlist(doc({"type": "track", "entity": {}}))
    assert tracks == [Track("", "")]


def test_load_propagates_extraction_errors():
    with pytest.raises(MarkerNotFound):
        load_douyin_playlist("https://example.test", fetch=lambda url: "<html></html>", marker=ROUTER_DATA_MARKER)


@pytest.mark.parametrize("artists", [5, "Artist X", {"name": "Artist X"}, None])
def test_parse_non_list_artists_gives_empty_artist(artists):
    tracks = parse_playlist(doc({"type": "track", "entity": {"track": {"name": "Song", "artists": artists}}}))
    assert tracks == [Track("Song", "")]
