"""
Command line for inspecting mention markup.

Provides the `mention-markup` command: plain-text projection, mention
listing, index mapping, edit reconciliation and suggestion lookup for a
markup value, using mention types from `--markup` templates or a YAML
settings file.
"""

import json
import logging

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .exceptions import MentionError
from .markup import Correction
from .markup import SelectionDelta
from .markup import apply_change_to_value
from .markup import get_mentions
from .markup import get_plain_text
from .markup import map_plain_text_index
from .registry import DEFAULT_MARKUP
from .registry import MentionRegistry
from .settings import EditorSettings
from .settings import load_settings

console = Console()


def _registry(ctx: click.Context) -> MentionRegistry:
    return ctx.obj["settings"].build_registry()


@click.group()
@click.version_option(version="0.1.0", prog_name="mention-markup")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML settings file describing the mention types",
)
@click.option(
    "--markup",
    "-m",
    "markups",
    multiple=True,
    help=f"Markup template of a mention type (repeatable, default {DEFAULT_MARKUP!r})",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, markups: tuple[str, ...], verbose: bool) -> None:
    """Mention markup - inspect values written in mention markup."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        if config_path:
            settings = load_settings(config_path)
        else:
            settings = EditorSettings.model_validate(
                {"types": [{"markup": markup} for markup in markups or (DEFAULT_MARKUP,)]}
            )
        settings.build_registry()
    except MentionError as e:
        raise click.ClickException(str(e)) from e

    ctx.obj = {"settings": settings}


@cli.command()
@click.argument("value")
@click.pass_context
def plain(ctx: click.Context, value: str) -> None:
    """Print the plain-text view of VALUE."""
    click.echo(get_plain_text(value, _registry(ctx)))


@cli.command()
@click.argument("value")
@click.option("--json", "as_json", is_flag=True, help="Print mentions as JSON")
@click.pass_context
def mentions(ctx: click.Context, value: str, as_json: bool) -> None:
    """List the mentions in VALUE."""
    found = get_mentions(value, _registry(ctx))

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "type_index": mention.type_index,
                        "id": mention.id,
                        "display": mention.display,
                        "plain_text_start": mention.plain_text_start,
                        "plain_text_end": mention.plain_text_end,
                        "markup_start": mention.markup_start,
                        "markup_end": mention.markup_end,
                        "meta_data": mention.meta_data,
                    }
                    for mention in found
                ]
            )
        )
        return

    if not found:
        console.print("[dim]No mentions[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Type", justify="right")
    table.add_column("Id")
    table.add_column("Display")
    table.add_column("Plain", justify="right")
    table.add_column("Markup", justify="right")
    for mention in found:
        table.add_row(
            str(mention.type_index),
            escape(mention.id),
            escape(mention.display),
            f"{mention.plain_text_start}-{mention.plain_text_end}",
            f"{mention.markup_start}-{mention.markup_end}",
        )
    console.print(table)


@cli.command(name="map")
@click.argument("value")
@click.argument("index", type=int)
@click.option(
    "--correction",
    type=click.Choice(["start", "end", "null"], case_sensitive=False),
    default="start",
    show_default=True,
    help="Policy for an index inside a mention",
)
@click.pass_context
def map_index(ctx: click.Context, value: str, index: int, correction: str) -> None:
    """Map plain-text INDEX to an offset in VALUE (``null`` inside a mention)."""
    offset = map_plain_text_index(value, _registry(ctx), index, Correction(correction.upper()))
    click.echo("null" if offset is None else str(offset))


@cli.command()
@click.argument("value")
@click.argument("new_plain")
@click.option("--start-before", type=int, help="Selection start before the edit")
@click.option("--end-before", type=int, help="Selection end before the edit")
@click.option("--end-after", type=int, help="Selection end after the edit")
@click.pass_context
def reconcile(
    ctx: click.Context,
    value: str,
    new_plain: str,
    start_before: int | None,
    end_before: int | None,
    end_after: int | None,
) -> None:
    """Apply the edit that turned VALUE's plain text into NEW_PLAIN."""
    selection = SelectionDelta(
        selection_start_before=start_before,
        selection_end_before=end_before,
        selection_end_after=end_after,
    )
    click.echo(apply_change_to_value(value, new_plain, selection, _registry(ctx)))


@cli.command()
@click.argument("value")
@click.option("--caret", type=int, help="Caret position in the plain text (default: end)")
@click.pass_context
def suggest(ctx: click.Context, value: str, caret: int | None) -> None:
    """List the suggestions offered at the caret of VALUE."""
    editor = ctx.obj["settings"].build_editor(value)
    plain_text = editor.plain_text
    editor.handle_select(len(plain_text) if caret is None else caret)

    entries = editor.session.entries()
    if not entries:
        console.print("[dim]No suggestions[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Type", justify="right")
    table.add_column("Query")
    table.add_column("Id")
    table.add_column("Display")
    for entry in entries:
        table.add_row(
            str(entry.index),
            str(entry.group.query_info.type_index),
            escape(entry.group.query_info.query),
            escape(entry.candidate.id),
            escape(entry.candidate.display_text),
        )
    console.print(table)


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
