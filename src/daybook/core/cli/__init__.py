"""Daybook CLI entry point for journal, search, export and sync commands."""

import click

from daybook import __version__


@click.group()
@click.version_option(version=__version__, package_name="daybook")
@click.option("--config", "config_file", default=None, help="Path to a YAML/JSON config file.")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def main(ctx: click.Context, config_file: str | None, verbose: bool) -> None:
    """Daybook: a dated journal with cloud sync."""
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file
    ctx.obj["verbose"] = verbose


# Register subcommands
from .journal_cmd import export, search, show, tags, write
from .sync_cmd import auto_sync, status, sync

main.add_command(show)
main.add_command(write)
main.add_command(search)
main.add_command(tags)
main.add_command(export)
main.add_command(sync)
main.add_command(status)
main.add_command(auto_sync)
