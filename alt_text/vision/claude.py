"""ClaudeVisionAdapter — Anthropic Claude messages backend."""
from typing import Any, Optional

from alt_text.constants import (
    ANTHROPIC_API_VERSION,
    ANTHROPIC_MESSAGES_URL,
    DEFAULT_MAX_TOKENS,
    JSON_HEADERS,
    MSG_ANTHROPIC_INCOMPLETE,
    MSG_EMPTY_ANTHROPIC,
    PROBE_MAX_TOKENS,
    PROBE_PROMPT,
)
from alt_text.vision.base import ProviderAdapter
from alt_text.vision.types import (
    AnalysisRequest,
    ImagePayload,
    PreparedRequest,
    ProviderConfig,
    ProviderIdentity,
)


class ClaudeVisionAdapter(ProviderAdapter):
    identity = ProviderIdentity.ANTHROPIC
    label = "Anthropic"
    incomplete_message = MSG_ANTHROPIC_INCOMPLETE
    empty_message = MSG_EMPTY_ANTHROPIC

    def _headers(self, settings: ProviderConfig) -> dict[str, str]:
        return {
            **JSON_HEADERS,
            "x-api-key": settings.api_key,
            "anthropic-version": ANTHROPIC_API_VERSION,
        }

    def build_request(
        self, settings: ProviderConfig, request: AnalysisRequest, image: ImagePayload
    ) -> PreparedRequest:
        body: dict[str, Any] = {
            "model": settings.model,
            "max_tokens": request.options.max_tokens or DEFAULT_MAX_TOKENS,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": image.mime_type,
                                "data": image.data,
                            },
                        },
                        {"type": "text", "text": request.prompt},
                    ],
                }
            ],
        }
        if request.options.temperature is not None:
            body["temperature"] = request.options.temperature
        return PreparedRequest(
            url=ANTHROPIC_MESSAGES_URL,
            headers=self._headers(settings),
            body=body,
            timeout=self.timeout,
        )

    def build_probe(self, settings: ProviderConfig) -> PreparedRequest:
        return PreparedRequest(
            url=ANTHROPIC_MESSAGES_URL,
            headers=self._headers(settings),
            body={
                "model": settings.model,
                "max_tokens": PROBE_MAX_TOKENS,
                "messages": [{"role": "user", "content": PROBE_PROMPT}],
            },
            timeout=self.probe_timeout,
        )

    def extract_text(self, data: Any) -> Optional[str]:
        match data:
            case {"content": [{"text": str() as text}, *_]}:
                return text
            case _:
                return None
