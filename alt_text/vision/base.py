"""ProviderAdapter — abstract base for vision provider backends.

An adapter turns an ``AnalysisRequest`` into one provider's wire format, sends
it through the injected ``HttpTransport`` and reduces the provider's response
envelope to plain text or an ``UpstreamError``. Configuration problems are
raised as ``ConfigurationError`` before any network call is made.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Optional

from alt_text.constants import (
    MSG_UNKNOWN_ERROR,
    PROBE_TIMEOUT,
    REQUEST_TIMEOUT,
)
from alt_text.errors import ConfigurationError, TransportError, UpstreamError
from alt_text.vision.fetcher import ImageFetcher
from alt_text.vision.transport import HttpResponse, HttpTransport
from alt_text.vision.types import (
    AnalysisRequest,
    ImagePayload,
    PreparedRequest,
    ProviderConfig,
    ProviderIdentity,
)

logger = logging.getLogger(__name__)


class ProviderAdapter(ABC):
    identity: ProviderIdentity
    label: str
    required: tuple[str, ...] = ("api_key", "model")
    incomplete_message: str
    empty_message: str
    timeout: float = REQUEST_TIMEOUT
    probe_timeout: float = PROBE_TIMEOUT

    def __init__(self, transport: HttpTransport, fetcher: ImageFetcher) -> None:
        self._transport = transport
        self._fetcher = fetcher

    # ── request side ──────────────────────────────────────────────────────────

    def check_config(self, settings: ProviderConfig) -> None:
        """Raise ConfigurationError unless every required field is set."""
        match settings.missing(self.required):
            case ():
                pass
            case missing:
                logger.debug("%s missing settings: %s", self.label, ", ".join(missing))
                raise ConfigurationError(self.incomplete_message)

    async def load_image(self, reference: str) -> ImagePayload:
        """Inline base64 image data; the default for providers that cannot fetch URLs."""
        return await self._fetcher.fetch(reference)

    @abstractmethod
    def build_request(
        self, settings: ProviderConfig, request: AnalysisRequest, image: ImagePayload
    ) -> PreparedRequest: ...

    @abstractmethod
    def build_probe(self, settings: ProviderConfig) -> PreparedRequest:
        """Minimal text-only request used to verify credentials."""
        ...

    # ── response side ─────────────────────────────────────────────────────────

    @abstractmethod
    def extract_text(self, data: Any) -> Optional[str]:
        """Text at the provider's documented response path, if present."""
        ...

    def error_message(self, error: Any) -> str:
        match error:
            case {"message": str() as message} if message:
                return message
            case _:
                return MSG_UNKNOWN_ERROR

    def parse(self, data: Any) -> str:
        match data:
            case {"error": error} if error is not None:
                raise UpstreamError(self.error_message(error))
            case _:
                pass
        text = self.extract_text(data)
        if not isinstance(text, str) or not text.strip():
            raise UpstreamError(self.empty_message)
        return text.strip()

    # ── calls ─────────────────────────────────────────────────────────────────

    async def analyze(self, settings: ProviderConfig, request: AnalysisRequest) -> str:
        if request.options.model:
            settings = replace(settings, model=request.options.model)
        self.check_config(settings)
        image = await self.load_image(request.image_ref)
        prepared = self.build_request(settings, request, image)
        logger.debug("%s request to %s (model=%s)", self.label, prepared.url, settings.model)
        response = await self._send(prepared)
        return self.parse(response.json())

    async def probe(self, settings: ProviderConfig) -> Optional[str]:
        """Error message from a test request, or None when it succeeds or cannot run."""
        if settings.missing(self.required):
            return None
        try:
            response = await self._send(self.build_probe(settings))
        except UpstreamError as e:
            return str(e)
        match response.json():
            case {"error": error} if error is not None:
                return self.error_message(error)
            case _:
                return None

    async def _send(self, prepared: PreparedRequest) -> HttpResponse:
        try:
            return await self._transport.post_json(
                prepared.url,
                headers=prepared.headers,
                body=prepared.body,
                timeout=prepared.timeout,
                params=prepared.params or None,
            )
        except TransportError as e:
            raise UpstreamError(str(e)) from e
