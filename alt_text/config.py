import json
import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, NamedTuple, Optional, Protocol

from dotenv import load_dotenv

from alt_text.constants import (
    DEFAULT_ANTHROPIC_MODEL,
    DEFAULT_AZURE_API_VERSION,
    DEFAULT_GEMINI_MODEL,
    DEFAULT_GROK_MODEL,
    DEFAULT_LOCALE,
    DEFAULT_MEDIA_PATH,
    DEFAULT_OLLAMA_ENDPOINT,
    DEFAULT_OLLAMA_MODEL,
    DEFAULT_OPENAI_MODEL,
    DEFAULT_PROVIDER,
    DEFAULT_SETTINGS_PATH,
    ENV_PREFIX,
    MSG_DEFINES_LOAD_FAILED,
    OPENAI_TYPE_AZURE,
    OPENAI_TYPE_OPENAI,
    SETTINGS_OFF,
    SETTINGS_ON,
)
from alt_text.vision.types import ProviderConfig, ProviderIdentity

logger = logging.getLogger(__name__)


# ── process-level settings ────────────────────────────────────────────────────


@dataclass(frozen=True)
class AppConfig:
    log_level: str
    settings_path: Path
    media_path: Path
    defines_path: Optional[Path]
    upload_base_url: str
    upload_dir: Optional[Path]
    locale: str

    @classmethod
    def from_env(cls) -> "AppConfig":
        load_dotenv()

        defines_path = os.getenv("ALT_TEXT_DEFINES_PATH") or None
        upload_dir = os.getenv("ALT_TEXT_UPLOAD_DIR") or None

        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            settings_path=Path(os.getenv("ALT_TEXT_SETTINGS_PATH") or DEFAULT_SETTINGS_PATH),
            media_path=Path(os.getenv("ALT_TEXT_MEDIA_PATH") or DEFAULT_MEDIA_PATH),
            defines_path=Path(defines_path) if defines_path else None,
            upload_base_url=os.getenv("ALT_TEXT_UPLOAD_URL", ""),
            upload_dir=Path(upload_dir) if upload_dir else None,
            locale=os.getenv("ALT_TEXT_LOCALE") or DEFAULT_LOCALE,
        )

    def load_defines(self) -> dict[str, str]:
        """Deploy-time defines from the JSON file at ``defines_path``, if any."""
        match self.defines_path:
            case None:
                return {}
            case path:
                try:
                    with open(path) as f:
                        raw = json.load(f)
                except (OSError, ValueError) as e:
                    logger.warning(MSG_DEFINES_LOAD_FAILED, path, e)
                    return {}
                match raw:
                    case dict():
                        return {str(k): "" if v is None else str(v) for k, v in raw.items()}
                    case _:
                        logger.warning(MSG_DEFINES_LOAD_FAILED, path, "not a JSON object")
                        return {}


# ── provider settings resolution ──────────────────────────────────────────────


class ConfigEntry(NamedTuple):
    env: str
    const: str
    default: str


def _entry(key: str, default: str = "") -> ConfigEntry:
    name = ENV_PREFIX + key.upper()
    return ConfigEntry(env=name, const=name, default=default)


CONFIG_MAP: dict[str, ConfigEntry] = {
    "ai_provider": _entry("ai_provider", DEFAULT_PROVIDER),
    "auto_generate": _entry("auto_generate", SETTINGS_ON),
    "openai_type": _entry("openai_type", OPENAI_TYPE_OPENAI),
    "openai_key": _entry("openai_key"),
    "openai_model": _entry("openai_model", DEFAULT_OPENAI_MODEL),
    "azure_endpoint": _entry("azure_endpoint"),
    "azure_api_version": _entry("azure_api_version", DEFAULT_AZURE_API_VERSION),
    "anthropic_key": _entry("anthropic_key"),
    "anthropic_model": _entry("anthropic_model", DEFAULT_ANTHROPIC_MODEL),
    "gemini_key": _entry("gemini_key"),
    "gemini_model": _entry("gemini_model", DEFAULT_GEMINI_MODEL),
    "ollama_endpoint": _entry("ollama_endpoint", DEFAULT_OLLAMA_ENDPOINT),
    "ollama_model": _entry("ollama_model", DEFAULT_OLLAMA_MODEL),
    "grok_key": _entry("grok_key"),
    "grok_model": _entry("grok_model", DEFAULT_GROK_MODEL),
}

SECRET_KEYS = frozenset({"openai_key", "anthropic_key", "gemini_key", "grok_key"})

# ProviderConfig field -> config key, per provider
PROVIDER_KEYS: dict[ProviderIdentity, dict[str, str]] = {
    ProviderIdentity.OPENAI: {"api_key": "openai_key", "model": "openai_model"},
    ProviderIdentity.AZURE_OPENAI: {
        "api_key": "openai_key",
        "model": "openai_model",
        "endpoint": "azure_endpoint",
        "api_version": "azure_api_version",
    },
    ProviderIdentity.ANTHROPIC: {"api_key": "anthropic_key", "model": "anthropic_model"},
    ProviderIdentity.GEMINI: {"api_key": "gemini_key", "model": "gemini_model"},
    ProviderIdentity.OLLAMA: {"endpoint": "ollama_endpoint", "model": "ollama_model"},
    ProviderIdentity.GROK: {"api_key": "grok_key", "model": "grok_model"},
}


class ConfigSource(str, Enum):
    CONSTANT = "constant"
    ENV = "env"
    DATABASE = "database"
    DEFAULT = "default"


class SettingsSource(Protocol):
    def all(self) -> dict[str, str]: ...


class ConfigResolver:
    """Resolve settings with precedence: define > env var > stored value > default.

    Values supplied by a define or an env var are "externally overridden":
    whatever an administrator stores for them is ignored.
    """

    def __init__(
        self,
        store: SettingsSource,
        defines: Optional[Mapping[str, str]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._store = store
        self._defines = dict(defines or {})
        self._environ = environ if environ is not None else os.environ

    def _lookup(self, key: str) -> tuple[ConfigSource, str]:
        entry = CONFIG_MAP.get(key)
        if entry is None:
            return ConfigSource.DEFAULT, ""

        if entry.const in self._defines:
            return ConfigSource.CONSTANT, str(self._defines[entry.const])

        env_value = self._environ.get(entry.env, "")
        if env_value != "":
            return ConfigSource.ENV, env_value

        stored = self._store.all().get(key, "")
        if stored not in ("", None):
            return ConfigSource.DATABASE, str(stored)

        return ConfigSource.DEFAULT, entry.default

    def resolve(self, key: str) -> str:
        return self._lookup(key)[1]

    def source(self, key: str) -> ConfigSource:
        return self._lookup(key)[0]

    def is_externally_overridden(self, key: str) -> bool:
        return self.source(key) in (ConfigSource.CONSTANT, ConfigSource.ENV)

    def provider_name(self) -> str:
        """Active provider name, with the Azure sub-mode folded in."""
        provider = self.resolve("ai_provider")
        if provider == ProviderIdentity.OPENAI.value and self.resolve("openai_type") == OPENAI_TYPE_AZURE:
            return ProviderIdentity.AZURE_OPENAI.value
        return provider

    def provider_config(self, identity: ProviderIdentity) -> ProviderConfig:
        return ProviderConfig(
            **{field: self.resolve(key) for field, key in PROVIDER_KEYS[identity].items()}
        )

    def auto_generate(self) -> bool:
        return self.resolve("auto_generate") == SETTINGS_ON


# ── persisted settings sanitization ───────────────────────────────────────────


ALLOWED_PROVIDERS = tuple(identity.value for identity in ProviderIdentity)
ALLOWED_OPENAI_TYPES = (OPENAI_TYPE_OPENAI, OPENAI_TYPE_AZURE)


def sanitize_settings(raw: Mapping[str, object]) -> dict[str, str]:
    """Normalize a submitted settings mapping before it is stored."""
    text_keys = [k for k in CONFIG_MAP if k not in ("ai_provider", "auto_generate", "openai_type")]

    def text(key: str) -> str:
        value = raw.get(key)
        return CONFIG_MAP[key].default if value is None else " ".join(str(value).split())

    provider = raw.get("ai_provider")
    openai_type = raw.get("openai_type")
    auto = raw.get("auto_generate")
    return {
        "ai_provider": provider if provider in ALLOWED_PROVIDERS else DEFAULT_PROVIDER,
        "auto_generate": SETTINGS_ON if auto not in (None, False, "", SETTINGS_OFF) else SETTINGS_OFF,
        "openai_type": openai_type if openai_type in ALLOWED_OPENAI_TYPES else OPENAI_TYPE_OPENAI,
        **{key: text(key) for key in text_keys},
    }
