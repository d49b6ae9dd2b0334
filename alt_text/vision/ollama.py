"""OllamaVisionAdapter — self-hosted Ollama generate backend."""
from typing import Any, Optional

from alt_text.constants import (
    JSON_HEADERS,
    MSG_EMPTY_OLLAMA,
    MSG_OLLAMA_INCOMPLETE,
    MSG_UNKNOWN_ERROR,
    OLLAMA_GENERATE_PATH,
    OLLAMA_PROBE_TIMEOUT,
    OLLAMA_TIMEOUT,
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


class OllamaVisionAdapter(ProviderAdapter):
    identity = ProviderIdentity.OLLAMA
    label = "Ollama"
    required = ("endpoint", "model")
    incomplete_message = MSG_OLLAMA_INCOMPLETE
    empty_message = MSG_EMPTY_OLLAMA
    timeout = OLLAMA_TIMEOUT
    probe_timeout = OLLAMA_PROBE_TIMEOUT

    def _prepare(self, settings: ProviderConfig, body: dict[str, Any], timeout: float) -> PreparedRequest:
        return PreparedRequest(
            url=settings.endpoint.rstrip("/") + OLLAMA_GENERATE_PATH,
            headers=dict(JSON_HEADERS),
            body=body,
            timeout=timeout,
        )

    def build_request(
        self, settings: ProviderConfig, request: AnalysisRequest, image: ImagePayload
    ) -> PreparedRequest:
        body: dict[str, Any] = {
            "model": settings.model,
            "prompt": request.prompt,
            "images": [image.data],
            "stream": False,
        }
        options = {}
        if request.options.temperature is not None:
            options["temperature"] = request.options.temperature
        if request.options.max_tokens:
            options["num_predict"] = request.options.max_tokens
        if options:
            body["options"] = options
        return self._prepare(settings, body, self.timeout)

    def build_probe(self, settings: ProviderConfig) -> PreparedRequest:
        body = {"model": settings.model, "prompt": PROBE_PROMPT, "stream": False}
        return self._prepare(settings, body, self.probe_timeout)

    def error_message(self, error: Any) -> str:
        # Ollama reports errors as a bare string; proxies in front of it may use an object
        match error:
            case str() if error:
                return error
            case str():
                return MSG_UNKNOWN_ERROR
            case _:
                return super().error_message(error)

    def extract_text(self, data: Any) -> Optional[str]:
        match data:
            case {"response": str() as text}:
                return text
            case _:
                return None
