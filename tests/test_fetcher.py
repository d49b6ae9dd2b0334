"""ImageFetcher tests: uploads on disk, local paths and remote URLs."""
import base64
from pathlib import Path
from unittest.mock import AsyncMock

import httpx
import pytest
from PIL import Image

from alt_text.errors import FetchError, TransportError
from alt_text.vision.fetcher import (
    ImageFetcher,
    LocalFileSource,
    RemoteSource,
    UploadsSource,
    detect_mime_type,
    is_remote,
)
from alt_text.vision.transport import HttpResponse, HttpxTransport

UPLOAD_URL = "https://example.com/wp-content/uploads"


def write_png(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", (4, 4), color="red").save(path, format="PNG")
    return path


def mock_transport(response: httpx.Response, seen=None) -> HttpxTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return response

    return HttpxTransport(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


# ── classification ────────────────────────────────────────────────────────────


def test_is_remote():
    assert is_remote("http://example.com/a.jpg")
    assert is_remote("https://example.com/a.jpg")
    assert not is_remote("/var/www/a.jpg")
    assert not is_remote("file:///var/www/a.jpg")


def test_uploads_source_claims_only_its_base_url(tmp_path):
    source = UploadsSource(UPLOAD_URL + "/", tmp_path)

    assert source.claims(f"{UPLOAD_URL}/2024/05/cat.png")
    assert not source.claims("https://example.com/other/cat.png")
    assert source.path_for(f"{UPLOAD_URL}/2024/05/my%20cat.png") == tmp_path / "2024/05/my cat.png"


# ── MIME detection ────────────────────────────────────────────────────────────


def test_detect_mime_type_from_contents(tmp_path):
    # extension deliberately wrong: detection reads the bytes
    png = write_png(tmp_path / "photo.jpg")

    assert detect_mime_type(png) == "image/png"


def test_detect_mime_type_defaults_to_jpeg(tmp_path):
    junk = tmp_path / "junk.png"
    junk.write_bytes(b"not an image")

    assert detect_mime_type(junk) == "image/jpeg"


# ── uploads ───────────────────────────────────────────────────────────────────


async def test_upload_is_read_from_disk_without_http(tmp_path):
    png = write_png(tmp_path / "2024" / "05" / "cat.png")
    seen = []
    transport = mock_transport(httpx.Response(500), seen=seen)
    fetcher = ImageFetcher.default(transport, UPLOAD_URL, tmp_path)

    payload = await fetcher.fetch(f"{UPLOAD_URL}/2024/05/cat.png")

    assert seen == []
    assert payload.mime_type == "image/png"
    assert base64.b64decode(payload.data) == png.read_bytes()


async def test_missing_upload_falls_back_to_http(tmp_path):
    seen = []
    transport = mock_transport(
        httpx.Response(200, content=b"jpegdata", headers={"content-type": "image/webp"}), seen=seen
    )
    fetcher = ImageFetcher.default(transport, UPLOAD_URL, tmp_path)

    payload = await fetcher.fetch(f"{UPLOAD_URL}/missing.webp")

    assert len(seen) == 1
    assert payload.mime_type == "image/webp"
    assert payload.data == base64.b64encode(b"jpegdata").decode()



async def test_upload_path_cannot_escape_upload_dir(tmp_path):
    write_png(tmp_path / "secret.png")
    seen = []
    transport = mock_transport(
        httpx.Response(200, content=b"remote", headers={"content-type": "image/png"}), seen=seen
    )
    fetcher = ImageFetcher.default(transport, UPLOAD_URL, tmp_path / "uploads")

    payload = await fetcher.fetch(f"{UPLOAD_URL}/../secret.png")

    assert len(seen) == 1
    assert payload.data == base64.b64encode(b"remote").decode()


# ── local files ───────────────────────────────────────────────────────────────


async def test_local_path_is_read(tmp_path):
    png = write_png(tmp_path / "cat.png")
    fetcher = ImageFetcher([LocalFileSource()])

    payload = await fetcher.fetch(str(png))

    assert payload.mime_type == "image/png"


async def test_file_url_is_read(tmp_path):
    png = write_png(tmp_path / "cat.png")
    fetcher = ImageFetcher([LocalFileSource()])

    payload = await fetcher.fetch(png.as_uri())

    assert payload.is_inline


async def test_missing_local_file_raises(tmp_path):
    fetcher = ImageFetcher([LocalFileSource()])

    with pytest.raises(FetchError, match="Image file not found"):
        await fetcher.fetch(str(tmp_path / "nope.png"))


# ── remote ────────────────────────────────────────────────────────────────────


async def test_remote_content_type_parameters_are_dropped():
    transport = mock_transport(
        httpx.Response(200, content=b"x", headers={"content-type": "image/png; charset=binary"})
    )

    payload = await ImageFetcher([RemoteSource(transport)]).fetch("http://example.com/a")

    assert payload.mime_type == "image/png"


async def test_remote_without_content_type_defaults_to_jpeg():
    transport = AsyncMock()
    transport.get = AsyncMock(return_value=HttpResponse(status_code=200, content=b"x"))

    payload = await ImageFetcher([RemoteSource(transport)]).fetch("http://example.com/a")

    assert payload.mime_type == "image/jpeg"
    transport.get.assert_awaited_once_with("http://example.com/a", timeout=30.0)


async def test_remote_empty_body_raises():
    transport = mock_transport(httpx.Response(200, content=b""))

    with pytest.raises(FetchError, match="Empty response when fetching image"):
        await ImageFetcher([RemoteSource(transport)]).fetch("http://example.com/a")


async def test_remote_transport_error_raises_fetch_error():
    transport = AsyncMock()
    transport.get = AsyncMock(side_effect=TransportError("Name or service not known"))

    with pytest.raises(FetchError, match="Failed to fetch image: Name or service not known"):
        await ImageFetcher([RemoteSource(transport)]).fetch("http://nowhere.invalid/a.png")
