"""Command-line preview of .apkg packages."""

import sys
from typing import NoReturn

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .core.exceptions import ApkgError
from .modules.apkg import list_contents, parse_package
from .shared.logging import setup_logger

console = Console()


def _fail(error: ApkgError) -> NoReturn:
    console.print(f"[red]✗ {error.code}[/red]: {escape(error.message)}")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """apkg-import - Inspect Anki packages (.apkg) from the terminal."""
    setup_logger()


@cli.command()
@click.argument("path", type=click.Path(dir_okay=False))
def entries(path: str) -> None:
    """List the archive entries of PATH without opening the collection."""
    try:
        names = list_contents(path)
    except ApkgError as e:
        _fail(e)

    for name in names:
        console.print(escape(name))


@cli.command()
@click.argument("path", type=click.Path(dir_okay=False))
def summary(path: str) -> None:
    """Parse PATH and show its decks with note and card counts."""
    try:
        package = parse_package(path)
    except ApkgError as e:
        _fail(e)

    cards_per_deck: dict[int, int] = {}
    for card in package.cards:
        cards_per_deck[card.deck_id] = cards_per_deck.get(card.deck_id, 0) + 1

    table = Table(title=f"{len(package.decks)} deck(s)")
    table.add_column("Deck", style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Cards", justify="right")

    for deck in package.decks:
        table.add_row(escape(deck.name), str(deck.id), str(cards_per_deck.get(deck.id, 0)))

    console.print(table)
    console.print(
        f"[bold]{len(package.models)}[/bold] model(s), "
        f"[bold]{len(package.notes)}[/bold] note(s), "
        f"[bold]{len(package.cards)}[/bold] card(s), "
        f"[bold]{len(package.media)}[/bold] media file(s)"
    )


@cli.command()
@click.argument("path", type=click.Path(dir_okay=False))
def models(path: str) -> None:
    """Show the note models of PATH with their fields and templates."""
    try:
        package = parse_package(path)
    except ApkgError as e:
        _fail(e)

    table = Table()
    table.add_column("Model", style="bold")
    table.add_column("Fields")
    table.add_column("Templates")

    for model in package.models:
        table.add_row(
            escape(model.name),
            escape(", ".join(model.fields)),
            escape(", ".join(template.name for template in model.templates)),
        )

    console.print(table)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
