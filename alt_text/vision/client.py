"""VisionClient — single entry point that dispatches to the configured provider."""
import logging
from typing import Optional

from alt_text.config import ConfigResolver
from alt_text.constants import MSG_ANALYZING, MSG_UNKNOWN_PROVIDER
from alt_text.errors import ConfigurationError
from alt_text.vision.base import ProviderAdapter
from alt_text.vision.claude import ClaudeVisionAdapter
from alt_text.vision.fetcher import ImageFetcher
from alt_text.vision.gemini import GeminiVisionAdapter
from alt_text.vision.ollama import OllamaVisionAdapter
from alt_text.vision.openai import (
    AzureOpenAIVisionAdapter,
    GrokVisionAdapter,
    OpenAIVisionAdapter,
)
from alt_text.vision.transport import HttpTransport
from alt_text.vision.types import AnalysisOptions, AnalysisRequest, ProviderIdentity

logger = logging.getLogger(__name__)

ADAPTER_TYPES: tuple[type[ProviderAdapter], ...] = (
    OpenAIVisionAdapter,
    AzureOpenAIVisionAdapter,
    GrokVisionAdapter,
    ClaudeVisionAdapter,
    GeminiVisionAdapter,
    OllamaVisionAdapter,
)


class VisionClient:

    def __init__(
        self,
        resolver: ConfigResolver,
        transport: HttpTransport,
        fetcher: Optional[ImageFetcher] = None,
    ) -> None:
        self._resolver = resolver
        fetcher = fetcher or ImageFetcher.default(transport)
        self._adapters: dict[ProviderIdentity, ProviderAdapter] = {
            adapter_type.identity: adapter_type(transport, fetcher) for adapter_type in ADAPTER_TYPES
        }

    def active_provider(self) -> ProviderIdentity:
        """Identity of the configured provider. Raises ConfigurationError if unknown."""
        name = self._resolver.provider_name()
        try:
            return ProviderIdentity(name)
        except ValueError:
            raise ConfigurationError(MSG_UNKNOWN_PROVIDER.format(provider=name)) from None

    def adapter(self, identity: ProviderIdentity) -> ProviderAdapter:
        return self._adapters[identity]

    async def analyze_image(
        self,
        image_ref: str,
        prompt: str,
        options: Optional[AnalysisOptions] = None,
    ) -> str:
        """Describe the image with the active provider. Raises on failure, never retries."""
        identity = self.active_provider()
        adapter = self._adapters[identity]
        request = AnalysisRequest(image_ref=image_ref, prompt=prompt, options=options or AnalysisOptions())
        logger.info(MSG_ANALYZING, adapter.label, image_ref)
        return await adapter.analyze(self._resolver.provider_config(identity), request)

    async def check_connection(self, identity: Optional[ProviderIdentity] = None) -> Optional[str]:
        """Send a test request; returns the provider's error message, or None."""
        identity = identity or self.active_provider()
        return await self._adapters[identity].probe(self._resolver.provider_config(identity))
