"""
CLI components (using typer)
"""

from pathlib import Path

import typer
from rich.console import Console

from . import describe

CONSOLE = Console()

APP = typer.Typer()


@APP.command()
def info(path: Path, in_memory: bool = False):
    """
    Show the format, tile size and metadata of a tileset.
    """
    describe.print_info(path, console=CONSOLE, in_memory=in_memory)


@APP.command()
def tile(path: Path, zoom: int, column: int, row: int, output: Path | None = None):
    """
    Extract a single tile from a tileset.
    """
    if not describe.write_tile(path, zoom, column, row, output=output, console=CONSOLE):
        raise typer.Exit(code=1)


@APP.command()
def find(root: Path):
    """
    List the complete tilesets below a directory.
    """
    describe.print_found(root, console=CONSOLE)


def main():
    global APP

    APP()
