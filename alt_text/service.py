"""AltTextService — the operation upload hooks, bulk actions and the CLI all call."""
import html
import logging
import re
from typing import Optional, Protocol, Union

from alt_text.config import ConfigResolver
from alt_text.constants import (
    ALT_TEXT_PROMPT,
    DEFAULT_LANGUAGE,
    LOCALE_LANGUAGES,
    MSG_ATTACHMENT_NO_URL,
    MSG_ATTACHMENT_NOT_FOUND,
    MSG_ATTACHMENT_NOT_IMAGE,
    MSG_AUTO_GENERATE_OFF,
    MSG_GENERATED,
    MSG_GENERATION_FAILED,
    MSG_KEEPING_EXISTING,
)
from alt_text.errors import AltTextError
from alt_text.stores import Attachment
from alt_text.vision.client import VisionClient
from alt_text.vision.types import AnalysisOptions

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")


class MediaLibrary(Protocol):
    def get(self, attachment_id: int) -> Optional[Attachment]: ...

    def get_alt_text(self, attachment_id: int) -> str: ...

    def set_alt_text(self, attachment_id: int, alt_text: str) -> bool: ...


# ── pure helpers ──────────────────────────────────────────────────────────────


def language_for_locale(locale: str) -> str:
    """Language name for a locale: exact match, then language-code prefix, then English."""
    match LOCALE_LANGUAGES.get(locale):
        case str() as language:
            return language
        case None:
            pass
    code = locale[:2]
    return next(
        (name for key, name in LOCALE_LANGUAGES.items() if code and key.startswith(code)),
        DEFAULT_LANGUAGE,
    )


def resolve_language(hint: Optional[str], default_locale: str) -> str:
    """A hint may already be a language name ("German") or a locale ("de_DE")."""
    match hint:
        case None | "":
            return language_for_locale(default_locale)
        case str() if hint in LOCALE_LANGUAGES.values():
            return hint
        case _:
            return language_for_locale(hint)


def build_prompt(language: str) -> str:
    return ALT_TEXT_PROMPT.format(language=language)


def sanitize_alt_text(text: str) -> str:
    """Strip markup and collapse whitespace to a single line."""
    return " ".join(html.unescape(_TAG_RE.sub("", text)).split())


def parse_attachment_id(reference: Union[int, str]) -> Optional[int]:
    match reference:
        case bool():
            return None
        case int():
            return reference
        case str() if reference.isdigit():
            return int(reference)
        case _:
            return None


# ── service ───────────────────────────────────────────────────────────────────


class AltTextService:

    def __init__(
        self,
        vision: VisionClient,
        resolver: ConfigResolver,
        media: Optional[MediaLibrary] = None,
        locale: str = "en_US",
        options: Optional[AnalysisOptions] = None,
    ) -> None:
        self._vision = vision
        self._resolver = resolver
        self._media = media
        self._locale = locale
        self._options = options

    async def generate_from_url(self, reference: str, language_hint: Optional[str] = None) -> str:
        prompt = build_prompt(resolve_language(language_hint, self._locale))
        return await self._vision.analyze_image(reference, prompt, self._options)

    def _attachment(self, attachment_id: int) -> Attachment:
        match self._media.get(attachment_id) if self._media is not None else None:
            case None:
                raise AltTextError(MSG_ATTACHMENT_NOT_FOUND.format(attachment_id=attachment_id))
            case attachment:
                return attachment

    async def generate_for_attachment(self, attachment_id: int, language_hint: Optional[str] = None) -> str:
        attachment = self._attachment(attachment_id)
        if not attachment.is_image:
            raise AltTextError(MSG_ATTACHMENT_NOT_IMAGE)
        if not attachment.url:
            raise AltTextError(MSG_ATTACHMENT_NO_URL)
        return await self.generate_from_url(attachment.url, language_hint)

    async def generate_and_save(
        self, attachment_id: int, overwrite: bool = False, language_hint: Optional[str] = None
    ) -> str:
        if not overwrite:
            existing = self._media.get_alt_text(attachment_id) if self._media is not None else ""
            if existing:
                logger.info(MSG_KEEPING_EXISTING, attachment_id)
                return existing

        alt_text = sanitize_alt_text(await self.generate_for_attachment(attachment_id, language_hint))
        self._media.set_alt_text(attachment_id, alt_text)
        logger.info(MSG_GENERATED, attachment_id)
        return alt_text

    async def generate(
        self,
        reference: Union[int, str],
        language_hint: Optional[str] = None,
        overwrite: bool = False,
    ) -> str:
        """Alt text for an attachment id (persisted) or an image path/URL (returned only)."""
        match parse_attachment_id(reference):
            case int() as attachment_id:
                return await self.generate_and_save(attachment_id, overwrite, language_hint)
            case None:
                return sanitize_alt_text(await self.generate_from_url(str(reference), language_hint))

    def get_existing_alt_text(self, attachment_id: int) -> tuple[str, bool]:
        self._attachment(attachment_id)
        alt_text = self._media.get_alt_text(attachment_id)
        return alt_text, bool(alt_text)

    async def handle_upload(self, attachment_id: int) -> Optional[str]:
        """Auto-generate hook for new uploads; failures are logged, never raised."""
        if not self._resolver.auto_generate():
            logger.debug(MSG_AUTO_GENERATE_OFF, attachment_id)
            return None
        attachment = self._media.get(attachment_id) if self._media is not None else None
        if attachment is None or not attachment.is_image:
            return None
        try:
            return await self.generate_and_save(attachment_id, overwrite=False)
        except AltTextError as e:
            logger.warning(MSG_GENERATION_FAILED, attachment_id, e)
            return None
