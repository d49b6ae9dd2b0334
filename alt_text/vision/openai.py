"""OpenAI-compatible chat-completions backends: OpenAI, Azure OpenAI and Grok."""
from typing import Any, Optional

from alt_text.constants import (
    AZURE_CHAT_PATH,
    DEFAULT_MAX_TOKENS,
    GROK_CHAT_URL,
    JSON_HEADERS,
    MSG_AZURE_NO_API_VERSION,
    MSG_AZURE_NO_ENDPOINT,
    MSG_EMPTY_OPENAI,
    MSG_GROK_INCOMPLETE,
    MSG_OPENAI_INCOMPLETE,
    OPENAI_CHAT_URL,
    PROBE_MAX_TOKENS,
    PROBE_PROMPT,
)
from alt_text.errors import ConfigurationError
from alt_text.vision.base import ProviderAdapter
from alt_text.vision.fetcher import is_remote
from alt_text.vision.types import (
    AnalysisRequest,
    ImagePayload,
    PreparedRequest,
    ProviderConfig,
    ProviderIdentity,
)


class OpenAIVisionAdapter(ProviderAdapter):
    identity = ProviderIdentity.OPENAI
    label = "OpenAI"
    incomplete_message = MSG_OPENAI_INCOMPLETE
    empty_message = MSG_EMPTY_OPENAI

    def chat_url(self, settings: ProviderConfig) -> tuple[str, dict[str, str]]:
        """Endpoint URL and query parameters."""
        return OPENAI_CHAT_URL, {}

    def auth_headers(self, settings: ProviderConfig) -> dict[str, str]:
        return {"Authorization": f"Bearer {settings.api_key}"}

    async def load_image(self, reference: str) -> ImagePayload:
        # remote images are fetched by the provider itself
        match is_remote(reference):
            case True:
                return ImagePayload(url=reference)
            case False:
                return await self._fetcher.fetch(reference)

    def _prepare(self, settings: ProviderConfig, body: dict[str, Any], timeout: float) -> PreparedRequest:
        url, params = self.chat_url(settings)
        return PreparedRequest(
            url=url,
            headers={**JSON_HEADERS, **self.auth_headers(settings)},
            body=body,
            timeout=timeout,
            params=params,
        )

    def build_request(
        self, settings: ProviderConfig, request: AnalysisRequest, image: ImagePayload
    ) -> PreparedRequest:
        image_url = image.data_url if image.is_inline else image.url
        body: dict[str, Any] = {
            "model": settings.model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": request.prompt},
                        {"type": "image_url", "image_url": {"url": image_url}},
                    ],
                }
            ],
            "max_tokens": request.options.max_tokens or DEFAULT_MAX_TOKENS,
        }
        if request.options.temperature is not None:
            body["temperature"] = request.options.temperature
        return self._prepare(settings, body, self.timeout)

    def build_probe(self, settings: ProviderConfig) -> PreparedRequest:
        body = {
            "model": settings.model,
            "messages": [{"role": "user", "content": PROBE_PROMPT}],
            "max_tokens": PROBE_MAX_TOKENS,
        }
        return self._prepare(settings, body, self.probe_timeout)

    def extract_text(self, data: Any) -> Optional[str]:
        match data:
            case {"choices": [{"message": {"content": str() as content}}, *_]}:
                return content
            case _:
                return None


class AzureOpenAIVisionAdapter(OpenAIVisionAdapter):
    """Same body and response schema as OpenAI; deployment URL and ``api-key`` auth."""
    identity = ProviderIdentity.AZURE_OPENAI
    label = "Azure OpenAI"
    required = ("api_key", "model", "endpoint", "api_version")

    def check_config(self, settings: ProviderConfig) -> None:
        if settings.missing(OpenAIVisionAdapter.required):
            raise ConfigurationError(self.incomplete_message)
        if not settings.endpoint:
            raise ConfigurationError(MSG_AZURE_NO_ENDPOINT)
        if not settings.api_version:
            raise ConfigurationError(MSG_AZURE_NO_API_VERSION)

    def chat_url(self, settings: ProviderConfig) -> tuple[str, dict[str, str]]:
        path = AZURE_CHAT_PATH.format(model=settings.model)
        return settings.endpoint.rstrip("/") + path, {"api-version": settings.api_version}

    def auth_headers(self, settings: ProviderConfig) -> dict[str, str]:
        return {"api-key": settings.api_key}


class GrokVisionAdapter(OpenAIVisionAdapter):
    identity = ProviderIdentity.GROK
    label = "Grok"
    incomplete_message = MSG_GROK_INCOMPLETE

    def chat_url(self, settings: ProviderConfig) -> tuple[str, dict[str, str]]:
        return GROK_CHAT_URL, {}
