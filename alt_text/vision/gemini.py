"""GeminiVisionAdapter — Google Gemini generateContent backend.

Gemini authenticates with the API key as a ``key`` query parameter rather than
a header.
"""
from typing import Any, Optional

from alt_text.constants import (
    GEMINI_BASE_URL,
    GEMINI_GENERATE_PATH,
    JSON_HEADERS,
    MSG_EMPTY_GEMINI,
    MSG_GEMINI_INCOMPLETE,
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


class GeminiVisionAdapter(ProviderAdapter):
    identity = ProviderIdentity.GEMINI
    label = "Gemini"
    incomplete_message = MSG_GEMINI_INCOMPLETE
    empty_message = MSG_EMPTY_GEMINI

    def __init__(self, *args: Any, base_url: str = GEMINI_BASE_URL, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._base_url = base_url.rstrip("/")

    def _prepare(self, settings: ProviderConfig, body: dict[str, Any], timeout: float) -> PreparedRequest:
        return PreparedRequest(
            url=self._base_url + GEMINI_GENERATE_PATH.format(model=settings.model),
            headers=dict(JSON_HEADERS),
            body=body,
            timeout=timeout,
            params={"key": settings.api_key},
        )

    def build_request(
        self, settings: ProviderConfig, request: AnalysisRequest, image: ImagePayload
    ) -> PreparedRequest:
        body: dict[str, Any] = {
            "contents": [
                {
                    "parts": [
                        {"inline_data": {"mime_type": image.mime_type, "data": image.data}},
                        {"text": request.prompt},
                    ]
                }
            ]
        }
        generation_config = {}
        if request.options.temperature is not None:
            generation_config["temperature"] = request.options.temperature
        if request.options.max_tokens:
            generation_config["maxOutputTokens"] = request.options.max_tokens
        if generation_config:
            body["generationConfig"] = generation_config
        return self._prepare(settings, body, self.timeout)

    def build_probe(self, settings: ProviderConfig) -> PreparedRequest:
        body = {"contents": [{"parts": [{"text": PROBE_PROMPT}]}]}
        return self._prepare(settings, body, self.probe_timeout)

    def extract_text(self, data: Any) -> Optional[str]:
        match data:
            case {"candidates": [{"content": {"parts": [{"text": str() as text}, *_]}}, *_]}:
                return text
            case _:
                return None
