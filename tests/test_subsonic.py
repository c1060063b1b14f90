"""SubsonicClient against an in-memory aiohttp session double."""

import hashlib
from urllib.parse import parse_qs, urlsplit

import aiohttp
import pytest

from module.sonic_player.catalog import SubsonicClient
from module.sonic_player.utils.errors import CatalogError, SubsonicAPIError


class FakeResponse:
    def __init__(self, status=200, payload=None):
        self.status = status
        self._payload = payload

    async def json(self, content_type=None):
        return self._payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.urls = []
        self.closed = False

    def get(self, url, timeout=None):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)

    async def close(self):
        self.closed = True


def ok(**body):
    return FakeResponse(payload={"subsonic-response": {"status": "ok", "version": "1.16.1", **body}})


def query(url):
    return {key: values[0] for key, values in parse_qs(urlsplit(url).query).items()}


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(session):
    return SubsonicClient("https://music.example.com/", "alice", "sesame", session=session)


def test_token_is_md5_of_password_and_salt(client):
    token = client.generate_token(salt="c19b2d")

    assert token == hashlib.md5(b"sesamec19b2d").hexdigest()


def test_build_url_contains_auth_and_params(client):
    client.generate_token(salt="abcd")

    url = client.build_url("getAlbum", {"id": "al-1", "skip": None, "flag": True})

    assert url.startswith("https://music.example.com/rest/getAlbum?")
    params = query(url)
    assert params == {
        "u": "alice",
        "t": hashlib.md5(b"sesameabcd").hexdigest(),
        "s": "abcd",
        "v": "1.16.1",
        "c": "SonicPlayer",
        "f": "json",
        "id": "al-1",
        "flag": "true",
    }


def test_token_is_generated_once_per_credentials(client):
    first = query(client.build_url("ping"))
    second = query(client.build_url("ping"))
    assert first["s"] == second["s"]
    assert len(first["s"]) == 16

    client.set_credentials("https://other.example.com", "bob", "pw")
    third = query(client.build_url("ping"))
    assert third["u"] == "bob"
    assert third["t"] == hashlib.md5(("pw" + third["s"]).encode()).hexdigest()


def test_stream_and_cover_urls(client):
    stream = query(client.stream_url("so-1", max_bitrate=192, stream_format="mp3"))
    assert stream["id"] == "so-1"
    assert stream["maxBitRate"] == "192"
    assert stream["format"] == "mp3"

    plain = query(client.stream_url("so-1", max_bitrate=0))
    assert "maxBitRate" not in plain
    assert "format" not in plain

    cover = client.cover_art_url("co-1")
    assert "/rest/getCoverArt?" in cover
    assert query(cover)["size"] == "300"


@pytest.mark.anyio
async def test_ping(client, session):
    session.responses.append(ok())

    assert await client.ping() is True
    assert "/rest/ping?" in session.urls[0]


@pytest.mark.anyio
async def test_failed_status_raises_api_error(client, session):
    session.responses.append(FakeResponse(payload={
        "subsonic-response": {"status": "failed", "error": {"code": 40, "message": "Wrong username or password"}},
    }))

    with pytest.raises(SubsonicAPIError) as exc_info:
        await client.ping()

    assert exc_info.value.code == 40
    assert exc_info.value.user_message == "帳號或密碼錯誤"


@pytest.mark.anyio
async def test_http_error_raises_catalog_error(client, session):
    session.responses.append(FakeResponse(status=503))

    with pytest.raises(CatalogError) as exc_info:
        await client.get_album("al-1")

    assert exc_info.value.status == 503


@pytest.mark.anyio
async def test_connection_error_raises_catalog_error(session):
    session.error = aiohttp.ClientConnectionError("refused")
    client = SubsonicClient("https://x", "u", "p", session=session)

    with pytest.raises(CatalogError):
        await client.get_genres()


class HtmlResponse(FakeResponse):
    async def json(self, content_type=None):
        raise ValueError("Expecting value: line 1 column 1 (char 0)")


@pytest.mark.anyio
async def test_non_json_body_raises_catalog_error(client, session):
    session.responses.append(HtmlResponse())

    with pytest.raises(CatalogError):
        await client.ping()


@pytest.mark.anyio
async def test_get_artists_flattens_index(client, session):
    session.responses.append(ok(artists={"index": [
        {"name": "A", "artist": [{"id": "1", "name": "ABBA"}, {"id": "2", "name": "Air"}]},
        {"name": "B", "artist": [{"id": "3", "name": "Bjork"}]},
        {"name": "C"},
    ]}))

    artists = await client.get_artists()

    assert [a["name"] for a in artists] == ["ABBA", "Air", "Bjork"]


@pytest.mark.anyio
async def test_list_endpoints_default_to_empty(client, session):
    session.responses.extend([ok(), ok(), ok(), ok(), ok()])

    assert await client.get_album_list() == []
    assert await client.get_playlists() == []
    assert await client.get_random_songs() == []
    assert await client.search("nothing") == {}
    assert await client.get_songs_by_genre("Jazz") == []


@pytest.mark.anyio
async def test_endpoint_parameters(client, session):
    session.responses.extend([ok(), ok(), ok()])

    await client.get_album_list("newest", size=20, offset=40)
    await client.get_random_songs(size=10, genre="Rock", from_year=1990)
    await client.search("air")

    album_list, random_songs, search = (query(url) for url in session.urls)
    assert (album_list["type"], album_list["size"], album_list["offset"]) == ("newest", "20", "40")
    assert random_songs["genre"] == "Rock"
    assert random_songs["fromYear"] == "1990"
    assert "toYear" not in random_songs
    assert (search["artistCount"], search["albumCount"], search["songCount"]) == ("20", "20", "50")


@pytest.mark.anyio
@pytest.mark.parametrize("item_type, key", [("song", "id"), ("album", "albumId"), ("artist", "artistId")])
async def test_star_uses_type_specific_parameter(client, session, item_type, key):
    session.responses.extend([ok(), ok()])

    assert await client.star("x-1", item_type) is True
    assert await client.unstar("x-1", item_type) is True

    assert query(session.urls[0])[key] == "x-1"
    assert "/rest/unstar?" in session.urls[1]


@pytest.mark.anyio
async def test_scrobble_submission_flag(client, session):
    session.responses.extend([ok(), ok()])

    await client.scrobble("so-1", submission=False)
    await client.scrobble("so-1")

    assert query(session.urls[0])["submission"] == "false"
    assert query(session.urls[1])["submission"] == "true"


def test_track_from_song_uses_album_fallbacks(client):
    album = {"id": "al-1", "name": "Moon Safari", "artist": "Air", "coverArt": "co-al-1"}
    song = {"id": 7, "title": "La Femme d'Argent", "duration": 429, "suffix": "flac", "bitRate": 900, "track": 1}

    track = client.track_from_song(song, album=album, max_bitrate=320)

    assert track.id == "7"
    assert track.artist == "Air"
    assert track.album == "Moon Safari"
    assert track.duration == 429.0
    assert track.cover_art == "co-al-1"
    assert track.track_number == 1
    params = query(track.locator)
    assert "/rest/stream?" in track.locator
    assert params["id"] == "7"
    assert params["maxBitRate"] == "320"


def test_track_from_song_without_duration(client):
    track = client.track_from_song({"id": "s", "title": "Untitled"})

    assert track.duration is None
    assert track.artist == ""


@pytest.mark.anyio
async def test_close_leaves_injected_session_open(client, session):
    await client.close()

    assert session.closed is False
