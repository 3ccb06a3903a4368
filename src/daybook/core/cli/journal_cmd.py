"""Journal commands: show, write, search, tags, export."""

from __future__ import annotations

import click

from daybook.core.storage import StorageError
from daybook.journal.export import EXPORT_FORMATS, export_journal

from .common import get_services, parse_day, run


def _echo_entry(day, entry) -> None:
    click.echo(f"{day.isoformat()}  [{', '.join(entry.tags)}]")
    if entry.text:
        click.echo(entry.text)


@click.command()
@click.argument("day", required=False)
@click.pass_context
def show(ctx: click.Context, day: str | None) -> None:
    """Show the entry for DAY (YYYY-MM-DD, default today)."""
    services = get_services(ctx)
    target = parse_day(day)
    entry = run(services.journal.load(target))
    if entry.is_empty:
        click.echo(f"No entry for {target.isoformat()}.")
        return
    _echo_entry(target, entry)


@click.command()
@click.argument("day", required=False)
@click.option("--text", "-t", default=None, help="Entry text. Omit to keep the current text.")
@click.option("--tag", "add_tags", multiple=True, help="Tag to add (repeatable).")
@click.option("--untag", "remove_tags", multiple=True, help="Tag to remove (repeatable).")
@click.option("--clear", is_flag=True, help="Delete the entry.")
@click.pass_context
def write(ctx, day, text, add_tags, remove_tags, clear) -> None:
    """Write or edit the entry for DAY (YYYY-MM-DD, default today)."""
    from daybook.journal.models import EMPTY_ENTRY, JournalEntry

    services = get_services(ctx)
    target = parse_day(day)

    async def _write():
        if clear:
            entry = EMPTY_ENTRY
        else:
            current = await services.journal.load(target)
            entry = JournalEntry(text=current.text if text is None else text, tags=(*current.tags, *add_tags))
            for tag in remove_tags:
                entry = entry.without_tag(tag)
        await services.journal.save(target, entry)
        return entry

    try:
        entry = run(_write())
    except StorageError as e:
        raise click.ClickException(f"Could not save entry: {e}") from e

    if entry.is_empty:
        click.echo(f"Entry for {target.isoformat()} removed.")
    else:
        click.echo(f"Saved entry for {target.isoformat()}.")


@click.command()
@click.argument("query", required=False, default="")
@click.option("--tag", "tags", multiple=True, help="Only entries with this tag (repeatable).")
@click.pass_context
def search(ctx: click.Context, query: str, tags: tuple[str, ...]) -> None:
    """Search entry text for QUERY, optionally filtered by tags."""
    services = get_services(ctx)
    results = run(services.searcher.search(query, tags))
    if not results:
        click.echo("No matching entries.")
        return
    for result in results:
        _echo_entry(result.date, result.entry)
        click.echo("")


@click.command()
@click.option("--rebuild", is_flag=True, help="Recompute the index from every entry first.")
@click.pass_context
def tags(ctx: click.Context, rebuild: bool) -> None:
    """List tags with the number of entries carrying each."""
    services = get_services(ctx)
    if rebuild:
        index = run(services.journal.rebuild_tag_index())
    else:
        index = run(services.journal.get_tag_index())
    if not index:
        click.echo("No tags yet.")
        return
    for tag, count in sorted(index.items(), key=lambda item: (-item[1], item[0])):
        click.echo(f"{tag}\t{count}")


@click.command()
@click.option("--format", "fmt", type=click.Choice(EXPORT_FORMATS), default="json", show_default=True)
@click.option("--output", "-o", type=click.Path(dir_okay=False, writable=True), default=None)
@click.pass_context
def export(ctx: click.Context, fmt: str, output: str | None) -> None:
    """Export the whole journal."""
    services = get_services(ctx)
    content = run(export_journal(services.journal, fmt))
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(content)
        click.echo(f"Exported to {output}")
    else:
        click.echo(content)
