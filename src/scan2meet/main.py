"""CLI entry point for scan2meet."""

import json
import logging
import subprocess
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from scan2meet.batch import BatchProcessor
from scan2meet.config import get_settings
from scan2meet.extractor import create_extractor
from scan2meet.models.business_card import FIELD_LABELS, BusinessCardData
from scan2meet.preprocessing import CardCropper
from scan2meet.research import create_researcher
from scan2meet.scanner import BusinessCardScanner
from scan2meet.scheduling import (
    MAX_LINKS,
    QueryParamNames,
    SchedulingLinkStore,
    build_scheduling_url,
)

app = typer.Typer(
    name="scan2meet",
    help="Scan business cards with a vision model and follow up on the contact.",
    add_completion=False,
)
links_app = typer.Typer(help="Manage scheduling links.")
app.add_typer(links_app, name="links")
console = Console()

BackendOption = Annotated[
    Optional[str],
    typer.Option(
        "--backend",
        "-b",
        help="Extractor backend: gemini[:<model>] or openai[:<model>]",
    ),
]


def configure_logging(verbose: bool = False) -> None:
    """Send log records through Rich; debug level when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
):
    configure_logging(verbose)


def _fail(message: object) -> typer.Exit:
    console.print(f"[red]Error:[/red] {message}")
    return typer.Exit(1)


def _create_scanner(backend: str | None, crop: bool) -> BusinessCardScanner:
    settings = get_settings()
    extractor = create_extractor(backend or settings.extractor_backend, settings)
    cropper = CardCropper(max_dim=settings.max_image_dim) if crop and settings.auto_crop else None
    return BusinessCardScanner(extractor=extractor, cropper=cropper)


def _link_store() -> SchedulingLinkStore:
    return SchedulingLinkStore(get_settings().links_path)


@app.command()
def scan(
    image_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the business card image",
            exists=True,
            readable=True,
            dir_okay=False,
        ),
    ],
    backend: BackendOption = None,
    output_json: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output raw JSON instead of formatted output"),
    ] = False,
    no_crop: Annotated[
        bool,
        typer.Option("--no-crop", help="Send the image without card auto-crop"),
    ] = False,
):
    """Scan a business card image and extract contact information."""
    try:
        scanner = _create_scanner(backend, crop=not no_crop)
        card = scanner.scan_path(image_path)
    except (FileNotFoundError, ValueError) as e:
        raise _fail(e)

    if output_json:
        print(json.dumps(card.contact_fields(), indent=2, ensure_ascii=False))
    else:
        _print_card(card)


def _print_card(card: BusinessCardData) -> None:
    console.print()
    console.print(f"[bold cyan]{card.full_name or 'No name'}[/bold cyan]")
    if card.position:
        console.print(f"[dim]{card.position}[/dim]")

    table = Table(show_header=False, box=None)
    table.add_column("Field", style="dim")
    table.add_column("Value")
    for name, label in FIELD_LABELS.items():
        value = getattr(card, name)
        if value:
            table.add_row(label, value)
    console.print(table)

    if card.metadata:
        console.print(
            f"[dim]Processed in {card.metadata.processing_time_ms:.0f}ms "
            f"({card.metadata.extractor_backend})[/dim]"
        )
    console.print()


@app.command()
def batch(
    inputs: Annotated[
        list[Path],
        typer.Argument(help="Image files or directories to process"),
    ],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Output file path (JSON or CSV)"),
    ],
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: json or csv"),
    ] = "json",
    backend: BackendOption = None,
):
    """Scan multiple business card images."""
    format = format.lower()
    if format not in ("json", "csv"):
        raise _fail(f"Invalid format '{format}'. Use 'json' or 'csv'.")

    try:
        processor = BatchProcessor(_create_scanner(backend, crop=True))
    except ValueError as e:
        raise _fail(e)

    images = processor.collect_images(inputs)
    if not images:
        console.print("[yellow]Warning:[/yellow] No images found to process.")
        raise typer.Exit(0)

    console.print(f"Processing {len(images)} image(s)...")
    result = processor.process(images)

    content = processor.to_csv(result) if format == "csv" else processor.to_json(result)
    output.write_text(content, encoding="utf-8")

    console.print(
        f"[green]Done:[/green] {result.succeeded} succeeded, "
        f"{result.failed} failed, {result.total_time_ms:.1f}ms total"
    )
    console.print(f"Output: {output}")


@app.command()
def research(
    company: Annotated[str, typer.Option("--company", "-c", help="Company name")],
    last_name: Annotated[str, typer.Option("--last-name", help="Family name")] = "",
    first_name: Annotated[str, typer.Option("--first-name", help="Given name")] = "",
    department: Annotated[str, typer.Option("--department", "-d", help="Department")] = "",
    output_json: Annotated[
        bool, typer.Option("--json", "-j", help="Output raw JSON")
    ] = False,
):
    """Research a contact and their company with a search-grounded model."""
    card = BusinessCardData(
        company=company, last_name=last_name, first_name=first_name, department=department
    )
    if not card.full_name:
        raise _fail("Give at least one of --last-name or --first-name")

    try:
        researcher = create_researcher(get_settings())
        with console.status(f"Researching {card.full_name}..."):
            result = researcher.research(card.company, card.full_name, card.department)
    except ValueError as e:
        raise _fail(e)

    if output_json:
        print(result.model_dump_json(indent=2))
        return
    console.print(Panel(Markdown(result.summary or "_No summary returned._"), title="Research"))


@links_app.command("list")
def links_list():
    """List saved scheduling links."""
    links = _link_store().links
    if not links:
        console.print("[dim]No scheduling links saved.[/dim]")
        return

    table = Table("ID", "Label", "URL")
    for link in links:
        table.add_row(link.id, link.label, link.url)
    console.print(table)


@links_app.command("add")
def links_add(
    url: Annotated[str, typer.Argument(help="Scheduling page URL")],
    label: Annotated[str, typer.Option("--label", "-l", help="Button label")] = "",
):
    """Save a scheduling link."""
    try:
        link = _link_store().add(label, url)
    except ValueError as e:
        raise _fail(e)
    if link is None:
        raise _fail(f"At most {MAX_LINKS} scheduling links can be saved")
    console.print(f"[green]Added[/green] {link.label} ({link.id})")


@links_app.command("update")
def links_update(
    link_id: Annotated[str, typer.Argument(help="Link ID")],
    url: Annotated[str, typer.Option("--url", "-u", help="New URL")],
    label: Annotated[str, typer.Option("--label", "-l", help="New label")] = "",
):
    """Change a scheduling link."""
    try:
        link = _link_store().update(link_id, label, url)
    except ValueError as e:
        raise _fail(e)
    if link is None:
        raise _fail(f"No scheduling link with id {link_id}")
    console.print(f"[green]Updated[/green] {link.label}")


@links_app.command("remove")
def links_remove(link_id: Annotated[str, typer.Argument(help="Link ID")]):
    """Delete a scheduling link."""
    if not _link_store().remove(link_id):
        raise _fail(f"No scheduling link with id {link_id}")
    console.print("[green]Removed[/green]")


@app.command("schedule-url")
def schedule_url(
    link_id: Annotated[str, typer.Argument(help="Scheduling link ID")],
    card_file: Annotated[
        Optional[Path],
        typer.Option("--card", help="JSON written by 'scan --json'", exists=True, dir_okay=False),
    ] = None,
    last_name: Annotated[str, typer.Option("--last-name")] = "",
    first_name: Annotated[str, typer.Option("--first-name")] = "",
    department: Annotated[str, typer.Option("--department")] = "",
    company: Annotated[str, typer.Option("--company")] = "",
    email: Annotated[str, typer.Option("--email")] = "",
    phone: Annotated[str, typer.Option("--phone")] = "",
):
    """Print a scheduling link with the contact's fields filled in."""
    link = _link_store().get(link_id)
    if link is None:
        raise _fail(f"No scheduling link with id {link_id}")

    card = BusinessCardData()
    if card_file is not None:
        try:
            card = BusinessCardData.model_validate_json(card_file.read_text(encoding="utf-8"))
        except ValueError as e:
            raise _fail(f"Invalid card file: {e}")

    overrides = {
        "last_name": last_name,
        "first_name": first_name,
        "department": department,
        "company": company,
        "email": email,
        "phone": phone,
    }
    card.update(**{k: v for k, v in overrides.items() if v})

    names = QueryParamNames.from_settings(get_settings())
    print(build_scheduling_url(link.url, card, names))


@app.command("app")
def run_app(
    port: Annotated[int, typer.Option("--port", "-p", help="Port to serve on")] = 8501,
):
    """Open the camera web app."""
    script = Path(__file__).parent / "web" / "app.py"
    cmd = [sys.executable, "-m", "streamlit", "run", str(script), "--server.port", str(port)]
    raise typer.Exit(subprocess.call(cmd))


@app.command()
def version():
    """Show version information."""
    from scan2meet import __version__

    console.print(f"scan2meet version {__version__}")


if __name__ == "__main__":
    app()
