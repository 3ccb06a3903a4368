"""Sync commands: sync, status, auto-sync."""

from __future__ import annotations

import click

from daybook.core.exceptions import SyncError

from .common import get_services, run


@click.command()
@click.option("--provider", "-p", default=None, help="Sync only this provider (google_drive, onedrive).")
@click.pass_context
def sync(ctx: click.Context, provider: str | None) -> None:
    """Upload local entries and download remote ones."""
    services = get_services(ctx)
    orchestrator = services.sync

    async def _sync():
        await orchestrator.check_connections()
        if provider:
            if not orchestrator.state.is_connected(provider):
                raise click.ClickException(f"{provider} is not connected.")
            return {provider: await orchestrator.full_sync(provider)}
        return await orchestrator.sync_all()

    try:
        results = run(_sync())
    except SyncError as e:
        raise click.ClickException(f"Sync failed: {e}") from e

    if not results:
        click.echo("No connected providers.")
    for name, result in results.items():
        click.echo(f"{name}: {result.uploaded} uploaded, {result.downloaded} downloaded")


@click.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show provider connections and the last sync time."""
    services = get_services(ctx)
    orchestrator = services.sync
    run(orchestrator.check_connections())
    state = orchestrator.state

    for name in orchestrator.providers:
        identity = state.identities.get(name)
        if state.is_connected(name):
            who = f" as {identity.display_name or identity.email}" if identity else ""
            click.echo(f"{name}: connected{who}")
        else:
            click.echo(f"{name}: not connected")
    last = state.last_sync_time.isoformat() if state.last_sync_time else "never"
    click.echo(f"Last sync: {last}")


@click.command("auto-sync")
@click.argument("enabled", type=click.Choice(["on", "off"]), required=False)
@click.pass_context
def auto_sync(ctx: click.Context, enabled: str | None) -> None:
    """Show or set the auto-sync preference."""
    services = get_services(ctx)
    if enabled is not None:
        run(services.settings.set_auto_sync_enabled(enabled == "on"))
    current = run(services.settings.get_auto_sync_enabled())
    click.echo(f"Auto-sync is {'on' if current else 'off'}")
