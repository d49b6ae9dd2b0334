"""ImageFetcher — resolve an image reference to base64 data and a MIME type.

A reference is tried against an ordered list of sources; the first source that
claims it produces the payload:

- ``UploadsSource``: URLs under the host's upload base URL, read from the
  upload directory on disk. Falls through when the file is missing.
- ``LocalFileSource``: plain filesystem paths and ``file://`` URLs.
- ``RemoteSource``: anything else, fetched over HTTP.
"""
import base64
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from PIL import Image, UnidentifiedImageError

from alt_text.constants import (
    DEFAULT_MIME_TYPE,
    IMAGE_FETCH_TIMEOUT,
    MSG_FETCH_EMPTY,
    MSG_FETCH_FAILED,
    MSG_FILE_NOT_FOUND,
    MSG_FILE_UNREADABLE,
)
from alt_text.errors import FetchError, TransportError
from alt_text.vision.transport import HttpTransport
from alt_text.vision.types import ImagePayload

logger = logging.getLogger(__name__)

REMOTE_SCHEMES = ("http", "https")


def is_remote(reference: str) -> bool:
    return urlparse(reference).scheme in REMOTE_SCHEMES


def detect_mime_type(path: Path) -> str:
    """MIME type sniffed from file contents, image/jpeg when undetectable."""
    try:
        with Image.open(path) as img:
            return Image.MIME.get(img.format or "", DEFAULT_MIME_TYPE)
    except (UnidentifiedImageError, OSError):
        return DEFAULT_MIME_TYPE


def _encode(data: bytes, mime_type: str) -> ImagePayload:
    return ImagePayload(data=base64.b64encode(data).decode(), mime_type=mime_type)


def _read_file(path: Path) -> ImagePayload:
    try:
        data = path.read_bytes()
    except OSError as e:
        raise FetchError(MSG_FILE_UNREADABLE.format(path=path, reason=e)) from e
    return _encode(data, detect_mime_type(path))


class ImageSource(ABC):
    @abstractmethod
    def claims(self, reference: str) -> bool: ...

    @abstractmethod
    async def fetch(self, reference: str) -> Optional[ImagePayload]:
        """Payload for the reference, or None to defer to the next source."""
        ...


class UploadsSource(ImageSource):

    def __init__(self, base_url: str, base_dir: Path) -> None:
        self._base_url = base_url.rstrip("/")
        self._base_dir = Path(base_dir)

    def claims(self, reference: str) -> bool:
        return bool(self._base_url) and reference.startswith(self._base_url + "/")

    def path_for(self, reference: str) -> Path:
        relative = unquote(urlparse(reference[len(self._base_url):]).path).lstrip("/")
        return self._base_dir / relative

    async def fetch(self, reference: str) -> Optional[ImagePayload]:
        path = self.path_for(reference)
        if not path.resolve().is_relative_to(self._base_dir.resolve()):
            logger.warning("Upload path outside %s, not reading from disk: %s", self._base_dir, reference)
            return None
        match path.is_file():
            case True:
                logger.debug("Reading upload from disk: %s", path)
                return _read_file(path)
            case False:
                return None


class LocalFileSource(ImageSource):

    def claims(self, reference: str) -> bool:
        return urlparse(reference).scheme in ("", "file")

    async def fetch(self, reference: str) -> Optional[ImagePayload]:
        parsed = urlparse(reference)
        path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(reference)
        match path.is_file():
            case True:
                return _read_file(path)
            case False:
                raise FetchError(MSG_FILE_NOT_FOUND.format(path=path))


class RemoteSource(ImageSource):

    def __init__(self, transport: HttpTransport, timeout: float = IMAGE_FETCH_TIMEOUT) -> None:
        self._transport = transport
        self._timeout = timeout

    def claims(self, reference: str) -> bool:
        return True

    async def fetch(self, reference: str) -> Optional[ImagePayload]:
        try:
            response = await self._transport.get(reference, timeout=self._timeout)
        except TransportError as e:
            raise FetchError(MSG_FETCH_FAILED.format(reason=e)) from e
        match response.content:
            case b"":
                raise FetchError(MSG_FETCH_EMPTY)
            case body:
                content_type = (response.header("content-type") or "").split(";")[0].strip()
                return _encode(body, content_type or DEFAULT_MIME_TYPE)


class ImageFetcher:

    def __init__(self, sources: list[ImageSource]) -> None:
        self._sources = sources

    @classmethod
    def default(
        cls,
        transport: HttpTransport,
        upload_base_url: str = "",
        upload_dir: Optional[Path] = None,
    ) -> "ImageFetcher":
        uploads = (
            [UploadsSource(upload_base_url, upload_dir)]
            if upload_base_url and upload_dir is not None
            else []
        )
        return cls([*uploads, LocalFileSource(), RemoteSource(transport)])

    async def fetch(self, reference: str) -> ImagePayload:
        for source in self._sources:
            if not source.claims(reference):
                continue
            payload = await source.fetch(reference)
            if payload is not None:
                return payload
        raise FetchError(MSG_FETCH_FAILED.format(reason=reference))
