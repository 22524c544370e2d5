"""Command-line interface for scriptbind code generation."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.table import Table

from scriptbind.generator import luacats, parse, python
from scriptbind.generator.errors import BuildError

if TYPE_CHECKING:
    from scriptbind.generator.types import Bindings


def _load(input_file: str) -> Bindings:
    """Parse a declaration file, exiting on build errors."""
    with open(input_file, encoding="utf-8") as f:
        text = f.read()

    try:
        return parse(text)
    except BuildError as e:
        print(f"Error: {e}")
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """scriptbind binding generator."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@click.option("--language", "-l", required=True, help="Target language (python, luacats)")
@click.option("--input", "-i", "input_file", required=True, help="Input declaration file")
@click.option("--output", "-o", "output_file", required=True, help="Output file")
@click.option(
    "--runtime-import",
    "runtime_import",
    default="scriptbind",
    help="Import path of the scriptbind package (python only)",
)
def gen(language: str, input_file: str, output_file: str, runtime_import: str) -> None:
    """Generate binding code from a declaration file."""
    bindings = _load(input_file)

    if language == "python":
        generated_file = python.render(
            bindings, source=Path(input_file).name, runtime_import=runtime_import
        )
    elif language == "luacats":
        generated_file = luacats.render(bindings)
    else:
        print(f"Unknown language: {language}")
        sys.exit(1)

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated_file)


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input declaration file")
def check(input_file: str) -> None:
    """Validate a declaration file."""
    bindings = _load(input_file)
    print(f"OK: {len(bindings.types)} types, {len(bindings.selections)} compiled")


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input declaration file")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Display the declared types and their exposed facets."""
    bindings = _load(input_file)

    if output_json:
        _output_json(bindings)
    else:
        _output_plain(bindings)


def _output_json(bindings: Bindings) -> None:
    """Output declarations as JSON."""
    data: dict = {
        "types": [t.to_dict(encode_json=True) for t in bindings.types],
        "selections": {
            name: [str(facet) for facet in selection.ordered()]
            for name, selection in bindings.selections.items()
        },
    }
    print(json.dumps(data, indent=2))


def _output_plain(bindings: Bindings) -> None:
    """Output declarations using rich text formatting."""
    console = Console()

    console.print("[bold cyan]Types[/bold cyan]")
    table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    table.add_column("Name", style="white")
    table.add_column("Kind", style="dim")
    table.add_column("Fields", style="yellow", justify="right")
    table.add_column("Methods", style="yellow", justify="right")
    table.add_column("Variants", style="yellow", justify="right")
    table.add_column("Exposed", style="green")

    for t in bindings.types:
        selection = bindings.selections.get(t.name)
        exposed = ", ".join(str(f) for f in selection.ordered()) if selection else "-"
        table.add_row(
            t.name,
            str(t.kind),
            str(len(t.fields)),
            str(len(t.methods)),
            str(len(t.variants)),
            exposed,
        )

    console.print(table)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
