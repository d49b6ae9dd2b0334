"""HttpTransport — outbound HTTP boundary used by adapters and the image fetcher."""
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from alt_text.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpResponse:
    status_code: int
    content: bytes
    headers: dict[str, str] = field(default_factory=dict)

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())

    def json(self) -> Any:
        """Decoded body, or None when the body is not valid JSON."""
        try:
            return json.loads(self.content)
        except ValueError:
            return None


class HttpTransport(ABC):
    @abstractmethod
    async def post_json(
        self,
        url: str,
        headers: dict[str, str],
        body: dict[str, Any],
        timeout: float,
        params: Optional[dict[str, str]] = None,
    ) -> HttpResponse:
        """POST a JSON body. Raises TransportError on transport failure."""
        ...

    @abstractmethod
    async def get(self, url: str, timeout: float) -> HttpResponse:
        """GET a resource. Raises TransportError on transport failure."""
        ...


class HttpxTransport(HttpTransport):

    def __init__(self, client: Optional[httpx.AsyncClient] = None) -> None:
        self._client = client or httpx.AsyncClient(follow_redirects=True)

    async def post_json(
        self,
        url: str,
        headers: dict[str, str],
        body: dict[str, Any],
        timeout: float,
        params: Optional[dict[str, str]] = None,
    ) -> HttpResponse:
        try:
            response = await self._client.post(
                url, headers=headers, json=body, params=params, timeout=timeout
            )
        except httpx.HTTPError as e:
            raise TransportError(str(e) or type(e).__name__) from e
        return _to_response(response)

    async def get(self, url: str, timeout: float) -> HttpResponse:
        try:
            response = await self._client.get(url, timeout=timeout)
        except httpx.HTTPError as e:
            raise TransportError(str(e) or type(e).__name__) from e
        return _to_response(response)

    async def aclose(self) -> None:
        await self._client.aclose()


def _to_response(response: httpx.Response) -> HttpResponse:
    url = response.request.url
    logger.debug("HTTP %s %s%s", response.status_code, url.host, url.path)
    return HttpResponse(
        status_code=response.status_code,
        content=response.content,
        headers={k.lower(): v for k, v in response.headers.items()},
    )
