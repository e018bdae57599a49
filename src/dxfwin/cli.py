"""DXF window extraction CLI."""

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress
from rich.table import Table

from dxfwin.config import settings
from dxfwin.models import Document, DrawingPage
from dxfwin.pipeline import DocumentParseError, extract_pages, load_document, summarize

app = typer.Typer(
    name="dxfwin",
    help="Extract window/door measurements from DXF drawings",
    add_completion=False,
)
console = Console()


def configure_logging(level: Optional[str] = None) -> None:
    """Route log records through rich."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def open_document(dxf_path: str, encoding: Optional[str]) -> Document:
    """Load a drawing, exiting with a message on failure."""
    try:
        return load_document(dxf_path, encoding=encoding)
    except FileNotFoundError as e:
        console.print(f"[bold red]File error:[/bold red] {e}")
        raise typer.Exit(code=2)
    except DocumentParseError as e:
        console.print(f"[bold red]Parse error:[/bold red] {e}")
        raise typer.Exit(code=2)


def mark(ok: bool) -> str:
    return "[green]✓[/green]" if ok else "[red]✗[/red]"


def page_table(index: int, page: DrawingPage, epsilon: float) -> Table:
    """Render one page as a rich table."""
    table = Table(
        title=(
            f"Page {index:02d}  序号 {page.serial or '-'}  楼号 {page.building or '-'}  "
            f"({page.box.min.x:.0f},{page.box.min.y:.0f}) - ({page.box.max.x:.0f},{page.box.max.y:.0f})"
        ),
        title_justify="left",
    )
    table.add_column("#", justify="right")
    table.add_column("Width", justify="right")
    table.add_column("Height", justify="right")
    table.add_column("OK", justify="center")
    table.add_column("Measured", justify="right")
    table.add_column("Widths")
    table.add_column("Heights")

    for i, window in enumerate(page.windows, start=1):
        table.add_row(
            str(i),
            f"{window.max_width:.0f}",
            f"{window.max_height:.0f}",
            mark(window.verified(epsilon)),
            f"{window.width:.0f} x {window.height:.0f}",
            ", ".join(f"{w:g}" for w in window.widths),
            ", ".join(f"{h:g}" for h in window.heights),
        )
    return table


@app.command()
def extract(
    dxf_path: str = typer.Argument(..., help="Path to DXF file to process"),
    output: Optional[str] = typer.Option(None, help="Write extracted pages as JSON"),
    encoding: Optional[str] = typer.Option(None, help="Text encoding of the DXF file"),
    log_level: Optional[str] = typer.Option(None, help="Logging level"),
) -> None:
    """Extract window measurements page by page."""
    configure_logging(log_level)
    console.print(f"[bold blue]Processing:[/bold blue] {dxf_path}")

    document = open_document(dxf_path, encoding)

    with Progress(console=console, transient=True) as progress:
        task = progress.add_task("Extracting", total=100)
        pages = extract_pages(
            document,
            progress=lambda value, label: progress.update(task, completed=value, description=label),
        )

    for i, page in enumerate(pages, start=1):
        console.print(page_table(i, page, settings.epsilon))

    summary = summarize(pages)
    console.print()
    console.print("[bold blue]Summary[/bold blue]")
    console.print(
        f"  Pages: {summary.page_count}  Info records: {summary.attribute_count} "
        f"{mark(summary.attributes_complete)}"
    )
    console.print(
        f"  Windows: {summary.window_count}  Mismatched: {summary.mismatch_count} "
        f"{mark(summary.mismatch_count == 0)}"
    )
    console.print(f"  Total area: {summary.total_area:.6f} m²")

    if output:
        payload = {
            "source": str(Path(dxf_path).name),
            "summary": summary.model_dump(),
            "pages": [page.model_dump(mode="json") for page in pages],
        }
        Path(output).write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        console.print(f"[dim]Wrote {output}[/dim]")


@app.command()
def inspect(
    dxf_path: str = typer.Argument(..., help="Path to DXF file to inspect"),
    encoding: Optional[str] = typer.Option(None, help="Text encoding of the DXF file"),
) -> None:
    """Show blocks, entity types and dimension styles of a drawing."""
    configure_logging()
    document = open_document(dxf_path, encoding)

    console.print(f"[bold blue]Drawing:[/bold blue] {dxf_path}")
    console.print(f"  Blocks: {len(document.blocks)}")

    counts = Counter(entity.entity_type for entity in document.entities)
    table = Table(title="Top-level entities", title_justify="left")
    table.add_column("Type")
    table.add_column("Count", justify="right")
    for type_name, count in counts.most_common():
        table.add_row(type_name, str(count))
    console.print(table)

    styles = Table(title="Dimension styles", title_justify="left")
    styles.add_column("Name")
    styles.add_column("Precision", justify="right")
    styles.add_column("Extension", justify="right")
    styles.add_column("Scale", justify="right")
    for style in document.dim_styles.values():
        styles.add_row(style.name, str(style.precision), f"{style.extension_length:g}", f"{style.scale:g}")
    console.print(styles)


if __name__ == "__main__":
    app()
