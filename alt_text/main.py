"""Entry point — wires AppConfig → ConfigResolver → VisionClient → AltTextService."""
import asyncio
import logging
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from alt_text.config import CONFIG_MAP, SECRET_KEYS, AppConfig, ConfigResolver
from alt_text.constants import (
    MSG_CLI_CHECK_FAIL,
    MSG_CLI_CHECK_OK,
    MSG_CLI_CHECK_SKIPPED,
    MSG_CLI_FAILED_COUNT,
    MSG_CLI_FAILURE,
    MSG_CLI_RESULT,
    SECRET_MASK,
)
from alt_text.errors import AltTextError
from alt_text.service import AltTextService
from alt_text.stores import JsonMediaLibrary, SettingsStore
from alt_text.vision.client import VisionClient
from alt_text.vision.fetcher import ImageFetcher
from alt_text.vision.transport import HttpxTransport
from alt_text.vision.types import AnalysisOptions

app = typer.Typer(help="Generate image alt text with vision-capable AI providers.")
console = Console()


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    list(map(root.removeHandler, root.handlers[:]))
    root.addHandler(RichHandler(rich_tracebacks=True, console=Console(stderr=True)))


def _resolver(config: AppConfig) -> ConfigResolver:
    return ConfigResolver(SettingsStore(config.settings_path), defines=config.load_defines())


def _build(config: AppConfig, options: Optional[AnalysisOptions] = None) -> tuple[AltTextService, HttpxTransport]:
    resolver = _resolver(config)
    transport = HttpxTransport()
    fetcher = ImageFetcher.default(transport, config.upload_base_url, config.upload_dir)
    vision = VisionClient(resolver, transport, fetcher)
    service = AltTextService(
        vision,
        resolver,
        media=JsonMediaLibrary(config.media_path),
        locale=config.locale,
        options=options,
    )
    return service, transport


async def _generate_all(
    service: AltTextService,
    transport: HttpxTransport,
    references: list[str],
    language: Optional[str],
    overwrite: bool,
) -> int:
    failed = 0
    try:
        for reference in references:
            try:
                text = await service.generate(reference, language, overwrite)
                console.print(MSG_CLI_RESULT.format(reference=reference, text=text))
            except AltTextError as e:
                failed += 1
                console.print(MSG_CLI_FAILURE.format(reference=reference, error=e))
    finally:
        await transport.aclose()
    return failed


@app.command()
def generate(
    references: Annotated[
        list[str],
        typer.Argument(
            help="Image paths, URLs or attachment ids. An all-digit value is always an attachment id;"
            " write ./123 to analyze a local file named 123."
        ),
    ],
    language: Annotated[
        Optional[str], typer.Option("--language", "-l", help="Locale (nb_NO) or language name")
    ] = None,
    overwrite: Annotated[
        bool, typer.Option("--overwrite", help="Replace existing alt text on attachments")
    ] = False,
    model: Annotated[Optional[str], typer.Option("--model", help="Override the configured model")] = None,
    max_tokens: Annotated[Optional[int], typer.Option("--max-tokens")] = None,
    temperature: Annotated[Optional[float], typer.Option("--temperature")] = None,
) -> None:
    """Generate alt text for each reference, one at a time."""
    config = AppConfig.from_env()
    _setup_logging(config.log_level)
    options = AnalysisOptions(model=model, max_tokens=max_tokens, temperature=temperature)
    service, transport = _build(config, options)

    failed = asyncio.run(_generate_all(service, transport, references, language, overwrite))
    if failed:
        console.print(MSG_CLI_FAILED_COUNT.format(failed=failed, total=len(references)))
        raise typer.Exit(1)


async def _check(config: AppConfig) -> tuple[str, Optional[str], bool]:
    resolver = _resolver(config)
    transport = HttpxTransport()
    try:
        vision = VisionClient(resolver, transport)
        identity = vision.active_provider()
        adapter = vision.adapter(identity)
        configured = not resolver.provider_config(identity).missing(adapter.required)
        return adapter.label, await vision.check_connection(identity), configured
    finally:
        await transport.aclose()


@app.command()
def check() -> None:
    """Send a test request to the active provider."""
    config = AppConfig.from_env()
    _setup_logging(config.log_level)
    try:
        label, error, configured = asyncio.run(_check(config))
    except AltTextError as e:
        console.print(MSG_CLI_CHECK_FAIL.format(provider="config", error=e))
        raise typer.Exit(1)

    match (configured, error):
        case (False, _):
            console.print(MSG_CLI_CHECK_SKIPPED.format(provider=label))
        case (True, None):
            console.print(MSG_CLI_CHECK_OK.format(provider=label))
        case (True, str()):
            console.print(MSG_CLI_CHECK_FAIL.format(provider=label, error=error))
            raise typer.Exit(1)


@app.command("config")
def show_config() -> None:
    """Show every setting, where its value comes from and whether it is locked."""
    config = AppConfig.from_env()
    _setup_logging(config.log_level)
    resolver = _resolver(config)

    table = Table("Key", "Value", "Source", "Locked")
    for key in CONFIG_MAP:
        value = resolver.resolve(key)
        shown = SECRET_MASK if key in SECRET_KEYS and value else value
        locked = "yes" if resolver.is_externally_overridden(key) else ""
        table.add_row(key, shown, resolver.source(key).value, locked)
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
