import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from alt_text.config import CONFIG_MAP, sanitize_settings
from alt_text.constants import (
    DEFAULT_MEDIA_PATH,
    DEFAULT_SETTINGS_PATH,
    MSG_STORE_LOAD_FAILED,
    MSG_STORE_SAVE_FAILED,
)

logger = logging.getLogger(__name__)


class JsonStore:
    """Flat JSON object persisted to a single file."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._store: dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        match self._path.exists():
            case True:
                try:
                    with open(self._path) as f:
                        raw = json.load(f)
                    self._store = dict(raw) if isinstance(raw, dict) else {}
                except (OSError, ValueError) as e:
                    logger.warning(MSG_STORE_LOAD_FAILED, self._path.name, e)
            case False:
                pass

    def _save(self) -> None:
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            with open(tmp, "w") as f:
                json.dump(self._store, f, indent=2)
            os.replace(tmp, self._path)
        except OSError as e:
            logger.warning(MSG_STORE_SAVE_FAILED, self._path.name, e)


class SettingsStore(JsonStore):
    """Persisted provider settings, as saved by an administrator."""

    def __init__(self, path: Path = Path(DEFAULT_SETTINGS_PATH)) -> None:
        super().__init__(path)

    def all(self) -> dict[str, str]:
        return {k: "" if v is None else str(v) for k, v in self._store.items()}

    def get(self, key: str) -> Optional[str]:
        return self.all().get(key)

    def update(self, values: Mapping[str, object]) -> dict[str, str]:
        """Merge, sanitize and persist; returns the stored settings."""
        defaults = {key: entry.default for key, entry in CONFIG_MAP.items()}
        self._store = sanitize_settings({**defaults, **self._store, **values})
        self._save()
        return self.all()


@dataclass(frozen=True)
class Attachment:
    attachment_id: int
    url: str
    mime_type: str
    alt_text: str = ""

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


class JsonMediaLibrary(JsonStore):
    """Attachment records keyed by id: ``{"url", "mime_type", "alt_text"}``."""

    def __init__(self, path: Path = Path(DEFAULT_MEDIA_PATH)) -> None:
        super().__init__(path)

    def get(self, attachment_id: int) -> Optional[Attachment]:
        match self._store.get(str(attachment_id)):
            case None:
                return None
            case record:
                return Attachment(
                    attachment_id=attachment_id,
                    url=record.get("url", ""),
                    mime_type=record.get("mime_type", ""),
                    alt_text=record.get("alt_text", ""),
                )

    def add(self, attachment_id: int, url: str, mime_type: str) -> Attachment:
        self._store[str(attachment_id)] = {"url": url, "mime_type": mime_type, "alt_text": ""}
        self._save()
        return Attachment(attachment_id=attachment_id, url=url, mime_type=mime_type)

    def get_alt_text(self, attachment_id: int) -> str:
        return self._store.get(str(attachment_id), {}).get("alt_text", "")

    def set_alt_text(self, attachment_id: int, alt_text: str) -> bool:
        match self._store.get(str(attachment_id)):
            case None:
                return False
            case record:
                record["alt_text"] = alt_text
                self._save()
                return True
