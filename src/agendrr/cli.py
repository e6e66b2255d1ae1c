"""agendrr CLI - render a day's calendar as a markdown agenda."""

import logging
import sys
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import click

from .adapters.google_calendar import CalendarError, GoogleCalendarAdapter
from .config import ConfigError, load_config
from .core.agenda import build_agenda, format_agenda
from .core.filters import default_filters
from .core.handlers import default_handlers
from .ports.calendar_repo import CalendarRepository

logger = logging.getLogger(__name__)


@click.group(invoke_without_command=True)
@click.version_option(package_name="agendrr")
@click.pass_context
def main(ctx):
    """agendrr - markdown agendas from Google Calendar."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(agenda)


@main.command()
@click.option("--offset", "-o", default=0, type=int,
              help="Number of days forwards/backwards to fetch events for")
@click.option("--config-file", "-c", "config_file", default=None,
              type=click.Path(dir_okay=False), help="Path to the configuration file")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def agenda(offset: int = 0, config_file: str | None = None, debug: bool = False):
    """Print the agenda for today (or today + offset days)."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )

    # Everything that can be wrong with the configuration fails here,
    # before the calendar is contacted.
    try:
        config = load_config(config_file)
        config.validate()
        filters = default_filters(config)
        handlers = default_handlers(config)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    # "Today" is the calendar day in the configured timezone, not the host's.
    target_date = datetime.now(ZoneInfo(config.timezone)).date() + timedelta(days=offset)
    try:
        calendar: CalendarRepository = GoogleCalendarAdapter(config)
        events = calendar.fetch_day(target_date)
    except CalendarError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    lines = build_agenda(events, filters, handlers)
    logger.debug(f"Rendered {len(lines)} of {len(events)} events for {target_date.isoformat()}")
    if lines:
        click.echo(format_agenda(lines))


@main.command()
@click.option("--config-file", "-c", "config_file", default=None,
              type=click.Path(dir_okay=False), help="Path to the configuration file")
def auth(config_file: str | None = None):
    """Authenticate with Google Calendar."""
    try:
        config = load_config(config_file)
        config.validate()
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    adapter = GoogleCalendarAdapter(config)
    if adapter.authenticate():
        click.echo(f"✓ Token saved to {adapter.token_path}")
    else:
        click.echo("✗ Authentication failed", err=True)
        sys.exit(1)
