"""
CDIM CLI - command-line front end for the conversion engine.

Directives can come from a settings file, from repeated --set options,
or from the --from/--to shorthands; they are applied in that order, so a
later source overrides an earlier one.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from cdim.detection import detect_format
from cdim.errors import ConversionError
from cdim.examples import DEFAULT_SETTINGS_TEXT, sample_inputs
from cdim.pipeline import ConversionPipeline
from cdim.settings import OUTPUT_FORMATS, Format

app = typer.Typer(
    name="cdim",
    help="Convert structured data between JSON, YAML, XML, CSV and Emmet",
    no_args_is_help=True,
)

console = Console()

logger = logging.getLogger(__name__)


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.exists():
        console.print(f"[bold red]Error:[/bold red] Path not found: {source}")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


def build_settings_text(
    settings_file: Optional[Path] = None,
    directives: Optional[List[str]] = None,
    input_format: Optional[str] = None,
    output_format: Optional[str] = None,
) -> str:
    """Assemble directive text from the CLI's settings sources."""
    lines = []
    if settings_file is not None:
        lines.append(settings_file.read_text(encoding="utf-8"))
    lines.extend(directives or [])
    if input_format:
        lines.append(f"inputformat={input_format}")
    if output_format:
        lines.append(f"outputformat={output_format}")
    return "\n".join(lines)


@app.command()
def convert(
    source: str = typer.Argument("-", help="Input file path, or - for stdin"),
    settings: Optional[Path] = typer.Option(None, "--settings", "-s", help="File of key=value directives"),
    directives: Optional[List[str]] = typer.Option(None, "--set", help="Directive key=value (repeatable)"),
    from_format: Optional[str] = typer.Option(None, "--from", help="Input format (json, yaml, xml, csv, emmet, auto)"),
    to_format: Optional[str] = typer.Option(None, "--to", help="Output format (json, yaml, xml, csv, emmet)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the result here instead of stdout"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """
    Convert one document between formats.
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)

    text = _read_input(source)
    settings_text = build_settings_text(settings, directives, from_format, to_format)

    try:
        outcome = ConversionPipeline().convert(text, settings_text)
    except ConversionError as e:
        console.print(f"[bold red]{type(e).__name__}:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    logger.debug(f"Converted {outcome.input_format.value} -> {outcome.output_format.value}")
    if output is not None:
        output.write_text(outcome.result, encoding="utf-8")
        console.print(f"[green]✓ Wrote {outcome.output_format.value} to {output}[/green]")
    else:
        typer.echo(outcome.result)


@app.command()
def detect(
    source: str = typer.Argument("-", help="Input file path, or - for stdin"),
) -> None:
    """
    Print the auto-detected format of a document.
    """
    fmt = detect_format(_read_input(source))
    typer.echo(fmt.value)
    if fmt is Format.UNKNOWN:
        raise typer.Exit(1)


@app.command()
def sample(
    format_name: str = typer.Argument("json", help="Format to render the sample record in"),
    show_settings: bool = typer.Option(False, "--settings", help="Print the default directive text instead"),
) -> None:
    """
    Print the built-in sample record, or the default directives.
    """
    if show_settings:
        typer.echo(DEFAULT_SETTINGS_TEXT)
        return

    fmt = next((f for f in OUTPUT_FORMATS if f.value == format_name.lower()), None)
    if fmt is None:
        console.print(f"[bold red]Error:[/bold red] Unknown format: {format_name}")
        raise typer.Exit(1)
    typer.echo(sample_inputs()[fmt])


if __name__ == "__main__":
    app()
