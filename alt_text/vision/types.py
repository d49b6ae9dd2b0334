"""Value types shared by the vision adapters."""
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Optional


class ProviderIdentity(str, Enum):
    OPENAI = "openai"
    AZURE_OPENAI = "azure-openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    OLLAMA = "ollama"
    GROK = "grok"


@dataclass(frozen=True)
class ProviderConfig:
    api_key: str = ""
    model: str = ""
    endpoint: str = ""
    api_version: str = ""

    def missing(self, required: tuple[str, ...]) -> tuple[str, ...]:
        """Names of required fields that are empty."""
        return tuple(name for name in required if not getattr(self, name))

    def __repr__(self) -> str:
        shown = ", ".join(
            f"{f.name}={'***' if f.name == 'api_key' and self.api_key else getattr(self, f.name)!r}"
            for f in fields(self)
        )
        return f"ProviderConfig({shown})"


@dataclass(frozen=True)
class ImagePayload:
    """Either a URL passed through to the provider or inline base64 data."""
    url: Optional[str] = None
    data: Optional[str] = None
    mime_type: Optional[str] = None

    @property
    def is_inline(self) -> bool:
        return self.data is not None

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


@dataclass(frozen=True)
class AnalysisOptions:
    model: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None


@dataclass(frozen=True)
class AnalysisRequest:
    image_ref: str
    prompt: str
    options: AnalysisOptions = field(default_factory=AnalysisOptions)


@dataclass(frozen=True)
class PreparedRequest:
    url: str
    headers: dict[str, str]
    body: dict[str, Any]
    timeout: float
    params: dict[str, str] = field(default_factory=dict)
