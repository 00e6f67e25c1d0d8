"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from cdm_client.models.config import ClientConfig
from cdm_client.models.records import AssetReference, CollectionDescriptor, FieldDescriptor
from cdm_client.utils.formatting import format_duration, format_size, mark


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "NotConfiguredError": [
            "• No server is configured.",
            "• Run `cdm-client init <HOST>` to set one up.",
        ],
        "ConfigurationError": [
            "• Check the values in the configuration file (`--show-config`).",
            "• Run `cdm-client init <HOST> --force` to rewrite it.",
        ],
        "RequestFailedError": [
            "• The server rejected the request.",
            "• Check that the collection alias and pointer exist.",
            "• Unpublished collections may not be visible to the web services.",
        ],
        "MalformedResponseError": [
            "• The server answer was not JSON, or not the expected records.",
            "• Verify the hostname and port point at a CONTENTdm server.",
        ],
        "ServiceError": [
            "• The server reported an error for this request.",
            "• Check that the collection alias exists (`cdm-client collections`).",
        ],
        "TransportError": [
            "• A network connection issue occurred.",
            "• Check the hostname, port and TLS setting.",
            "• Run `cdm-client diagnose` to test connectivity.",
        ],
        "RenameFailedError": [
            "• The file was downloaded but could not be moved into place.",
            "• Check permissions and free space in the download directory.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration."""
    console = Console()
    content = ""
    for key, value in config_data.items():
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: ClientConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    server = config.server_descriptor()
    table.add_row(
        "Server:",
        f"[green]{server.base_url}[/green]" if server else "[red]Not configured[/red]",
    )
    table.add_row("TLS:", "✓ Enabled" if config.use_tls else "✗ Disabled")
    table.add_row("Download Dir:", f"[dim]{config.download_dir}[/dim]")
    table.add_row("Max Workers:", str(config.max_workers))
    table.add_row(
        "Timeout:", f"{config.timeout:g}s" if config.timeout else "None"
    )

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )


def print_collections_table(collections: list[CollectionDescriptor]):
    """Displays the collections of a server."""
    console = Console()
    if not collections:
        console.print("[dim]No collections found.[/dim]")
        return

    table = Table(title=f"Collections ({len(collections)})", box=box.ROUNDED)
    table.add_column("Alias", style="bold magenta", no_wrap=True)
    table.add_column("Name", style="cyan")
    table.add_column("Path", style="dim")
    for collection in collections:
        table.add_row(collection.alias, collection.name, collection.path)
    console.print(table)


def print_fields_table(alias: str, fields: list[FieldDescriptor]):
    """Displays the metadata fields of a collection."""
    console = Console()
    if not fields:
        console.print(f"[dim]No fields found for '{alias}'.[/dim]")
        return

    table = Table(title=f"Fields of {alias}", box=box.ROUNDED)
    table.add_column("Nick", style="bold magenta", no_wrap=True)
    table.add_column("Name", style="cyan")
    table.add_column("DC", style="dim")
    table.add_column("Type")
    table.add_column("Req", justify="center")
    table.add_column("Search", justify="center")
    table.add_column("Hidden", justify="center")
    table.add_column("Vocab", justify="center")
    for field in fields:
        table.add_row(
            field.nick,
            field.name,
            field.dc_mapping,
            field.type,
            mark(field.is_required),
            mark(field.is_searchable),
            mark(field.is_hidden),
            mark(field.vocabulary_flag),
        )
    console.print(table)


def print_json(data: Any):
    """Pretty-prints a JSON payload."""
    Console().print_json(data=data)


def print_download_summary(
    destination_dir: Path,
    results: dict[AssetReference, BaseException | None],
    duration_s: float,
):
    """Displays the outcome of a download session."""
    console = Console()

    downloaded = [asset for asset, error in results.items() if error is None]
    failed = {asset: error for asset, error in results.items() if error is not None}
    total_size = 0
    for path in {destination_dir / asset.filename for asset in downloaded}:
        if path.is_file():
            total_size += path.stat().st_size

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=16)
    stats_table.add_column(style="white", justify="left")
    stats_table.add_row("✓ Downloaded:", f"[bold green]{len(downloaded)}[/bold green]")
    if failed:
        stats_table.add_row("✗ Failed:", f"[bold red]{len(failed)}[/bold red]")
    stats_table.add_row("", "")
    stats_table.add_row("Total Size:", f"[cyan]{format_size(total_size)}[/cyan]")
    stats_table.add_row("Time Elapsed:", f"[blue]{format_duration(duration_s)}[/blue]")
    stats_table.add_row("Directory:", f"[dim]{destination_dir}[/dim]")

    for asset, error in failed.items():
        console.print(
            f"[red]✗ {asset.filename} ({asset.alias}/{asset.pointer}):[/red] "
            f"{type(error).__name__}: {error}"
        )

    console.print(
        Panel(
            stats_table,
            title="📥 [bold]Download Complete[/bold]" if not failed
            else "📥 [bold]Download Finished With Errors[/bold]",
            border_style="red" if failed else "green",
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
