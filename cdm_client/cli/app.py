"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from cdm_client import __version__
from cdm_client.api.client import ContentDmClient
from cdm_client.exceptions import CdmClientError, ConfigurationError
from cdm_client.media.downloader import AssetDownloader
from cdm_client.models.config import ClientConfig
from cdm_client.models.records import (
    AssetReference,
    asset_for_item,
    compound_pages,
    safe_filename,
)
from cdm_client.models.server import Visibility
from cdm_client.storage.config_manager import ConfigManager

from .formatters import (
    format_error_with_suggestions,
    print_collections_table,
    print_config,
    print_download_summary,
    print_fields_table,
    print_json,
    print_validation_table,
)

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("cdm_client")

app = typer.Typer(
    name="cdm-client",
    help=(
        "Query CONTENTdm collections and download item files. Use 'cdm-client"
        " <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "cdm-client"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config() -> ClientConfig:
    return ConfigManager(CONFIG_FILE).load_config()


def _client_for(config: ClientConfig) -> ContentDmClient:
    try:
        server = config.server_descriptor()
    except ValueError as e:
        raise ConfigurationError(f"Invalid server settings: {e}") from e
    return ContentDmClient(server, timeout=config.timeout)


def _run(coro):
    """Runs a coroutine, turning client errors into a rendered panel and exit code 1."""
    try:
        return asyncio.run(coro)
    except CdmClientError as e:
        console.print(format_error_with_suggestions(e))
        log.debug("Full traceback:", exc_info=True)
        raise typer.Exit(code=1) from e


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """CONTENTdm client CLI"""
    if version:
        console.print(f"[bold]cdm-client[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("cdm_client").setLevel(log_level)

    if show_config:
        if not CONFIG_FILE.is_file():
            console.print(
                "[red]✗ Config file not found.[/] Run [cyan]cdm-client init[/cyan]"
                " first."
            )
            raise typer.Exit(code=1)
        config_manager = ConfigManager(CONFIG_FILE)
        config_manager._parser.read(CONFIG_FILE, encoding="utf-8")
        print_config(CONFIG_FILE, config_manager._get_config_as_dict())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    hostname: str = typer.Argument(..., help="Host name of the CONTENTdm server."),
    port: int = typer.Option(80, "--port", "-p", help="Server port."),
    use_tls: bool = typer.Option(False, "--tls/--no-tls", help="Connect over HTTPS."),
    download_dir: str = typer.Option(
        "downloads", "--download-dir", "-d", help="Default download directory."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration without asking."
    ),
):
    """Initialize configuration with the server address."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    settings = {
        "hostname": hostname,
        "port": port,
        "use_tls": use_tls,
        "download_dir": download_dir,
    }
    try:
        ClientConfig(**settings, config_path=str(CONFIG_DIR)).server_descriptor()
    except ValueError as e:
        console.print(f"[red]✗ Invalid server settings: {e}[/red]")
        raise typer.Exit(code=1) from e

    try:
        ConfigManager(CONFIG_FILE).save_new_config(settings)
    except ConfigurationError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e
    console.print(f"\n[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")
    console.print("Try: [cyan]cdm-client collections[/cyan]")


@app.command()
def validate():
    """Validate the current configuration."""
    try:
        config = _load_config()
        config.server_descriptor()
        print_validation_table(config)
    except (CdmClientError, ValueError) as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def collections(
    unpublished: bool = typer.Option(
        False, "--unpublished", help="List unpublished collections instead."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print raw records as JSON."),
):
    """List the collections of the server."""
    visibility = Visibility.UNPUBLISHED if unpublished else Visibility.PUBLISHED

    async def _collections_async():
        async with _client_for(_load_config()) as client:
            return await client.list_collections(visibility)

    result = _run(_collections_async())
    if as_json:
        print_json([c.model_dump() for c in result])
    else:
        print_collections_table(result)


@app.command()
def fields(
    alias: str = typer.Argument(..., help="Collection alias."),
    as_json: bool = typer.Option(False, "--json", help="Print raw records as JSON."),
):
    """Show the metadata fields of a collection."""

    async def _fields_async():
        async with _client_for(_load_config()) as client:
            return await client.collection_field_info(alias)

    result = _run(_fields_async())
    if as_json:
        print_json([f.model_dump() for f in result])
    else:
        print_fields_table(alias, result)


@app.command()
def item(
    alias: str = typer.Argument(..., help="Collection alias."),
    pointer: str = typer.Argument(..., help="Item pointer."),
):
    """Show the metadata of an item."""

    async def _item_async():
        async with _client_for(_load_config()) as client:
            return await client.item_info(alias, pointer)

    print_json(_run(_item_async()))


@app.command()
def compound(
    alias: str = typer.Argument(..., help="Collection alias."),
    pointer: str = typer.Argument(..., help="Compound object pointer."),
):
    """Show the structure of a compound object."""

    async def _compound_async():
        async with _client_for(_load_config()) as client:
            return await client.compound_object_info(alias, pointer)

    print_json(_run(_compound_async()))


@app.command(name="download")
def download_command(
    alias: str = typer.Argument(..., help="Collection alias."),
    pointers: list[str] = typer.Argument(..., help="One or more item pointers."),  # noqa: B008
    output_dir: Path | None = typer.Option(  # noqa: B008
        None, "-o", "--output", help="Directory to save files in (overrides config)."
    ),
    name: str | None = typer.Option(
        None, "--name", help="File name to save a single item under."
    ),
    pages: bool = typer.Option(
        False, "--pages", help="Treat pointers as compound objects and fetch every page."
    ),
    workers: int | None = typer.Option(
        None, "-w", "--workers", help="Number of simultaneous downloads."
    ),
):
    """Download item files."""
    if name and (len(pointers) > 1 or pages):
        console.print("[red]✗ --name can only be used with a single item.[/red]")
        raise typer.Exit(code=1)
    if name is not None and not safe_filename(name):
        console.print(f"[red]✗ '{name}' is not a usable file name.[/red]")
        raise typer.Exit(code=1)

    cli_options = {"max_workers": workers} if workers is not None else {}

    async def _download_async():
        config = ConfigManager(CONFIG_FILE).load_config(cli_options)
        destination_dir = (output_dir or Path(config.download_dir)).expanduser()
        destination_dir.mkdir(parents=True, exist_ok=True)

        async with _client_for(config) as client:
            assets: list[AssetReference] = []
            for pointer in pointers:
                if pages:
                    info = await client.compound_object_info(alias, pointer)
                    found = compound_pages(alias, info)
                    if not found:
                        log.warning(
                            f"[yellow]{alias}/{pointer} has no pages.[/yellow]"
                        )
                    assets.extend(found)
                elif name:
                    assets.append(
                        AssetReference(alias=alias, pointer=pointer, filename=name)
                    )
                else:
                    info = await client.item_info(alias, pointer)
                    assets.append(asset_for_item(alias, pointer, info))

            log.info(f"Downloading {len(assets)} file(s) to [dim]{destination_dir}[/dim]")
            start_time = time.monotonic()
            results = await AssetDownloader(client).download_many(
                assets, destination_dir, max_concurrent=config.max_workers
            )
            return destination_dir, results, time.monotonic() - start_time

    destination_dir, results, duration = _run(_download_async())
    print_download_summary(destination_dir, results, duration)
    if any(error is not None for error in results.values()):
        raise typer.Exit(code=1)


@app.command()
def diagnose():
    """Diagnose common configuration and connectivity issues."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    if CONFIG_FILE.is_file():
        console.print(f"[green]✓[/] Config file exists at: [dim]{CONFIG_FILE}[/dim]")
    else:
        console.print(
            "[red]✗ Config file not found.[/] Run [cyan]cdm-client init[/cyan]."
        )
        raise typer.Exit(code=1)

    try:
        config = _load_config()
        client = _client_for(config)
        console.print("[green]✓[/] Configuration file is valid and can be loaded.")
    except CdmClientError as e:
        console.print(f"[red]✗ Configuration validation failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    if not client.is_configured:
        console.print("[red]✗ No hostname is configured.[/] Run `init` again.")
        raise typer.Exit(code=1)

    console.print(f"\n[dim]Testing connectivity to {client.server.base_url}...[/dim]")

    async def test_connection() -> bool:
        async with client:
            try:
                found = await client.list_collections(Visibility.PUBLISHED)
            except CdmClientError as e:
                console.print(f"[red]✗ Connection test failed: {e}[/red]")
                return False
        console.print(
            f"[green]✓[/] Server answered with {len(found)} published collection(s)."
        )
        return True

    if not asyncio.run(test_connection()):
        console.print(
            "\n[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
        raise typer.Exit(code=1)
    console.print("\n[bold green]✓ All checks passed! Your setup looks good.[/bold green]\n")
