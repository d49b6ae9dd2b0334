"""CLI tests for the alt-text command."""
import json
from unittest.mock import AsyncMock, patch

import pytest
from rich.console import Console
from typer.testing import CliRunner

from alt_text.errors import FetchError
from alt_text.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.setattr("alt_text.config.load_dotenv", lambda **_: None)
    monkeypatch.setattr("alt_text.main.console", Console(width=200))
    monkeypatch.setenv("ALT_TEXT_SETTINGS_PATH", str(tmp_path / "settings.json"))
    monkeypatch.setenv("ALT_TEXT_MEDIA_PATH", str(tmp_path / "media.json"))
    monkeypatch.delenv("ALT_TEXT_DEFINES_PATH", raising=False)
    for key in ("AI_PROVIDER", "OPENAI_KEY", "OPENAI_TYPE", "GEMINI_KEY", "ANTHROPIC_KEY"):
        monkeypatch.delenv(f"AI_ALT_TEXT_{key}", raising=False)
    return tmp_path


# ── generate ──────────────────────────────────────────────────────────────────


def test_generate_prints_alt_text():
    with patch("alt_text.main.AltTextService.generate", new=AsyncMock(return_value="A cat")) as gen:
        result = runner.invoke(app, ["generate", "http://example.com/cat.jpg", "--language", "nb_NO"])

    assert result.exit_code == 0
    assert "A cat" in result.output
    gen.assert_awaited_once_with("http://example.com/cat.jpg", "nb_NO", False)


def test_generate_reports_failures_and_exits_nonzero():
    async def fake_generate(reference, language, overwrite):
        if reference.endswith("missing.png"):
            raise FetchError("Image file not found: missing.png")
        return "A dog"

    with patch("alt_text.main.AltTextService.generate", new=AsyncMock(side_effect=fake_generate)):
        result = runner.invoke(app, ["generate", "/tmp/dog.png", "/tmp/missing.png"])

    assert result.exit_code == 1
    assert "A dog" in result.output
    assert "Image file not found" in result.output
    assert "1 of 2 image(s) failed" in result.output


def test_generate_passes_overrides_to_service():
    with patch("alt_text.main.AltTextService") as service_cls:
        service_cls.return_value.generate = AsyncMock(return_value="x")
        result = runner.invoke(app, ["generate", "7", "--overwrite", "--model", "gpt-4o-mini", "--max-tokens", "80"])

    assert result.exit_code == 0
    options = service_cls.call_args.kwargs["options"]
    assert options.model == "gpt-4o-mini"
    assert options.max_tokens == 80
    service_cls.return_value.generate.assert_awaited_once_with("7", None, True)



def test_generate_help_explains_digit_references():
    result = runner.invoke(app, ["generate", "--help"])

    assert result.exit_code == 0
    assert "./123" in result.output

# ── config ────────────────────────────────────────────────────────────────────


def test_config_masks_secrets_and_shows_sources(isolated_env, monkeypatch):
    (isolated_env / "settings.json").write_text(json.dumps({"gemini_model": "gemini-1.5-pro"}))
    defines = isolated_env / "defines.json"
    defines.write_text(json.dumps({"AI_ALT_TEXT_OPENAI_KEY": "sk-secret"}))
    monkeypatch.setenv("ALT_TEXT_DEFINES_PATH", str(defines))

    result = runner.invoke(app, ["config"])

    assert result.exit_code == 0
    assert "sk-secret" not in result.output
    assert "••••••••" in result.output
    assert "constant" in result.output
    assert "database" in result.output
    assert "gemini-1.5-pro" in result.output


# ── check ─────────────────────────────────────────────────────────────────────


def test_check_unknown_provider_fails(monkeypatch):
    monkeypatch.setenv("AI_ALT_TEXT_AI_PROVIDER", "skynet")

    result = runner.invoke(app, ["check"])

    assert result.exit_code == 1
    assert "Unknown AI provider: skynet" in result.output


def test_check_unconfigured_provider_is_skipped(monkeypatch):
    monkeypatch.setenv("AI_ALT_TEXT_AI_PROVIDER", "gemini")

    result = runner.invoke(app, ["check"])

    assert result.exit_code == 0
    assert "not fully configured" in result.output


def test_check_ok(monkeypatch):
    monkeypatch.setenv("AI_ALT_TEXT_OPENAI_KEY", "sk-test")

    with patch("alt_text.main.VisionClient.check_connection", new=AsyncMock(return_value=None)):
        result = runner.invoke(app, ["check"])

    assert result.exit_code == 0
    assert "OpenAI connection OK" in result.output


def test_check_reports_provider_error(monkeypatch):
    monkeypatch.setenv("AI_ALT_TEXT_AI_PROVIDER", "anthropic")
    monkeypatch.setenv("AI_ALT_TEXT_ANTHROPIC_KEY", "bad")

    with patch("alt_text.main.VisionClient.check_connection", new=AsyncMock(return_value="invalid x-api-key")):
        result = runner.invoke(app, ["check"])

    assert result.exit_code == 1
    assert "invalid x-api-key" in result.output


def test_check_azure_without_endpoint_is_skipped(isolated_env):
    (isolated_env / "settings.json").write_text(json.dumps({
        "ai_provider": "openai",
        "openai_type": "azure",
        "openai_key": "k",
        "openai_model": "m",
        "azure_endpoint": "",
    }))

    result = runner.invoke(app, ["check"])

    assert result.exit_code == 0
    assert "Azure OpenAI is not fully configured" in result.output
    assert "connection OK" not in result.output
