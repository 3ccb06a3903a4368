"""Shared setup logic for CLI commands."""

from __future__ import annotations

import asyncio
from datetime import date
from pathlib import Path

import click

DAYBOOK_DIR = Path.home() / ".daybook"
CONFIG_PATH = DAYBOOK_DIR / "config.yaml"
SECRETS_PATH = DAYBOOK_DIR / "secrets.yaml"


def load_config(config_file: str | None = None):
    """Load config from ``config_file`` or ~/.daybook/config.yaml."""
    from daybook.core.config import Config

    return Config(config_file=config_file or str(CONFIG_PATH))


def load_secrets():
    """Env vars first, then ~/.daybook/secrets.yaml."""
    from daybook.core.secrets import EnvProvider, SecretsManager, YamlFileProvider

    return SecretsManager(providers=[EnvProvider(), YamlFileProvider(SECRETS_PATH)])


def get_services(ctx: click.Context):
    """Build services once per invocation and cache them on the context."""
    obj = ctx.ensure_object(dict)
    if "services" not in obj:
        from daybook.core.exceptions import DaybookError
        from daybook.core.utils.logging import setup_logging
        from daybook.services import create_services

        try:
            config = load_config(obj.get("config_file"))
            setup_logging(
                level=config.get("logging.level", "WARNING"),
                log_file=config.get("logging.file") or None,
                verbose=obj.get("verbose", False),
            )
            config.ensure_directories()
            obj["services"] = create_services(config, load_secrets())
        except DaybookError as e:
            raise click.ClickException(str(e)) from e
        except OSError as e:
            raise click.ClickException(f"Could not set up data or log directories: {e}") from e
    return obj["services"]


def run(coro):
    """Drive one command's coroutine on a fresh event loop."""
    return asyncio.run(coro)


def parse_day(value: str | None) -> date:
    """``YYYY-MM-DD`` (or None for today) -> date, as a click usage error on failure."""
    from daybook.journal.dates import key_to_date

    if value is None:
        return date.today()
    parsed = key_to_date(value)
    if parsed is None:
        raise click.BadParameter(f"'{value}' is not a valid YYYY-MM-DD date")
    return parsed
