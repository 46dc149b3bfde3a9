"""Command-line interface for python-refnotes.

Provides commands for rendering reference macros in document files from the terminal.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer

from . import Document, __version__
from .settings import load_settings

app = typer.Typer(
    name="refnotes",
    help="Render footnote-style references in document trees from the command line.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"refnotes version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log progress to stderr.")
    ] = False,
) -> None:
    """Render footnote-style references in document trees from the command line."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def transform(
    file: Annotated[Path, typer.Argument(help="Path to the document XML file")],
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to a YAML settings file")
    ] = None,
) -> None:
    """Execute the reference macros of a document."""
    try:
        settings = load_settings(config)
        doc = Document(file)
        result = doc.transform(settings)
        output_path = output or file
        doc.save(output_path)
        typer.echo(f"{result} and saved to {output_path}")

        for failure in result.failures:
            typer.echo(f"  Failed: {failure.message}", err=True)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def info(
    file: Annotated[Path, typer.Argument(help="Path to the document XML file")],
) -> None:
    """Show reference information for a document."""
    try:
        doc = Document(file)
        groups = doc.reference_groups()
        typer.echo(f"File: {file}")
        typer.echo(f"Occurrences: {len(doc.occurrences)}")
        typer.echo(f"References: {len(groups)}")
        typer.echo(f"Collection points: {len(doc.collection_points)}")
        for group in groups:
            typer.echo(f"  [{group.id}] x{len(group.occurrences)} {group.content!r}")
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
