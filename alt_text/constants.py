"""All magic values live here — no inline literals anywhere else."""

# Config resolution
ENV_PREFIX = "AI_ALT_TEXT_"
SETTINGS_ON = "1"
SETTINGS_OFF = "0"
OPENAI_TYPE_OPENAI = "openai"
OPENAI_TYPE_AZURE = "azure"

DEFAULT_PROVIDER = "openai"
DEFAULT_OPENAI_MODEL = "gpt-4o"
DEFAULT_AZURE_API_VERSION = "2024-02-15-preview"
DEFAULT_ANTHROPIC_MODEL = "claude-3-5-sonnet-20241022"
DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
DEFAULT_OLLAMA_ENDPOINT = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL = "llava"
DEFAULT_GROK_MODEL = "grok-2-vision-1212"

# Provider endpoints
OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"
GROK_CHAT_URL = "https://api.x.ai/v1/chat/completions"
AZURE_CHAT_PATH = "/openai/deployments/{model}/chat/completions"
ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_API_VERSION = "2023-06-01"
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
GEMINI_GENERATE_PATH = "/models/{model}:generateContent"
OLLAMA_GENERATE_PATH = "/api/generate"

# Request shaping
JSON_HEADERS = {"Content-Type": "application/json"}
DEFAULT_MAX_TOKENS = 300
REQUEST_TIMEOUT: float = 30.0
OLLAMA_TIMEOUT: float = 60.0
IMAGE_FETCH_TIMEOUT: float = 30.0
PROBE_PROMPT = "test"
PROBE_MAX_TOKENS = 5
PROBE_TIMEOUT: float = 10.0
OLLAMA_PROBE_TIMEOUT: float = 30.0
DEFAULT_MIME_TYPE = "image/jpeg"

# Configuration errors
MSG_UNKNOWN_PROVIDER = "Unknown AI provider: {provider}"
MSG_OPENAI_INCOMPLETE = "OpenAI configuration is incomplete. Please set API key and model."
MSG_AZURE_NO_ENDPOINT = "Azure OpenAI endpoint is not configured."
MSG_AZURE_NO_API_VERSION = "Azure OpenAI API version is not configured."
MSG_ANTHROPIC_INCOMPLETE = "Anthropic configuration is incomplete. Please set API key and model."
MSG_GEMINI_INCOMPLETE = "Gemini configuration is incomplete. Please set API key and model."
MSG_OLLAMA_INCOMPLETE = "Ollama configuration is incomplete. Please set endpoint and model."
MSG_GROK_INCOMPLETE = "Grok configuration is incomplete. Please set API key and model."

# Upstream errors
MSG_UNKNOWN_ERROR = "Unknown error"
MSG_EMPTY_OPENAI = "Empty response from model."
MSG_EMPTY_ANTHROPIC = "Empty response from Claude."
MSG_EMPTY_GEMINI = "Empty response from Gemini."
MSG_EMPTY_OLLAMA = "Empty response from Ollama."

# Fetch errors
MSG_FETCH_FAILED = "Failed to fetch image: {reason}"
MSG_FETCH_EMPTY = "Empty response when fetching image."
MSG_FILE_NOT_FOUND = "Image file not found: {path}"
MSG_FILE_UNREADABLE = "Could not read image file {path}: {reason}"

# Attachment errors
MSG_ATTACHMENT_NOT_FOUND = "Attachment {attachment_id} does not exist."
MSG_ATTACHMENT_NOT_IMAGE = "Attachment is not an image."
MSG_ATTACHMENT_NO_URL = "Could not get attachment URL."

# Log messages
MSG_ANALYZING = "→ %s (%s)"
MSG_GENERATED = "✓ Alt text generated for %s"
MSG_GENERATION_FAILED = "✗ Alt text generation failed for %s: %s"
MSG_KEEPING_EXISTING = "Attachment %s already has alt text, keeping it"
MSG_AUTO_GENERATE_OFF = "Auto-generate disabled, skipping attachment %s"
MSG_STORE_LOAD_FAILED = "Store load failed for %s: %s, starting fresh"
MSG_STORE_SAVE_FAILED = "Store save failed for %s: %s"
MSG_DEFINES_LOAD_FAILED = "Could not load defines from %s: %s"

# Prompt
DEFAULT_LANGUAGE = "English"
ALT_TEXT_PROMPT = (
    "Generate a concise, descriptive alt text for this image in {language}. "
    "The alt text should:\n"
    "- Be 1-2 sentences maximum\n"
    "- Describe the main subject and important details\n"
    "- Be useful for screen readers\n"
    '- Not start with "Image of" or "Picture of"\n'
    "- Not include decorative descriptions unless relevant\n\n"
    "Return only the alt text, nothing else."
)

LOCALE_LANGUAGES: dict[str, str] = {
    "en_US": "English",
    "en_GB": "English",
    "en_AU": "English",
    "en_CA": "English",
    "nb_NO": "Norwegian",
    "nn_NO": "Norwegian Nynorsk",
    "sv_SE": "Swedish",
    "da_DK": "Danish",
    "fi": "Finnish",
    "de_DE": "German",
    "de_AT": "German",
    "de_CH": "German",
    "fr_FR": "French",
    "fr_CA": "French",
    "es_ES": "Spanish",
    "es_MX": "Spanish",
    "it_IT": "Italian",
    "pt_BR": "Portuguese",
    "pt_PT": "Portuguese",
    "nl_NL": "Dutch",
    "pl_PL": "Polish",
    "ru_RU": "Russian",
    "ja": "Japanese",
    "ko_KR": "Korean",
    "zh_CN": "Chinese (Simplified)",
    "zh_TW": "Chinese (Traditional)",
    "ar": "Arabic",
    "he_IL": "Hebrew",
    "tr_TR": "Turkish",
    "cs_CZ": "Czech",
    "el": "Greek",
    "hu_HU": "Hungarian",
    "ro_RO": "Romanian",
    "uk": "Ukrainian",
    "vi": "Vietnamese",
    "th": "Thai",
    "id_ID": "Indonesian",
}

# App config
DEFAULT_SETTINGS_PATH = ".alt_text_settings.json"
DEFAULT_MEDIA_PATH = ".alt_text_media.json"
DEFAULT_LOCALE = "en_US"

# CLI
SECRET_MASK = "••••••••"
MSG_CLI_RESULT = "[green]✓[/green] {reference}: {text}"
MSG_CLI_FAILURE = "[red]✗[/red] {reference}: {error}"
MSG_CLI_FAILED_COUNT = "{failed} of {total} image(s) failed"
MSG_CLI_CHECK_OK = "[green]✓[/green] {provider} connection OK"
MSG_CLI_CHECK_FAIL = "[red]✗[/red] {provider}: {error}"
MSG_CLI_CHECK_SKIPPED = "[yellow]{provider} is not fully configured, nothing to check[/yellow]"
