"""
Operator CLI for the goal link cache.

Commands:
    cache list     - Show cached goal links and negative markers
    cache clear    - Clear one goal (--match/--minute) or everything (--all)
    resolve        - Resolve a single goal and print the link

Usage:
    goalreplay cache list
    goalreplay cache clear --match 4803233 --minute 23
    goalreplay cache clear --all
    goalreplay resolve 4803233 23 Arsenal Chelsea --scorer home --kickoff 2024-03-02T15:00:00Z
"""

from __future__ import annotations

import json
import sys
from datetime import datetime

import click

from goalreplay import __version__
from goalreplay.cache import create_cache
from goalreplay.config import GoalReplaySettings
from goalreplay.core.exceptions import GoalReplayError
from goalreplay.core.models import GoalEvent, GoalKey
from goalreplay.core.types import ResolutionStatus
from goalreplay.log import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="goalreplay")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, debug: bool):
    """Goal clip link resolution and cache management."""
    settings = GoalReplaySettings()
    if debug:
        settings = settings.model_copy(update={"debug": True})
    configure_logging(settings)
    ctx.obj = settings


@cli.group()
def cache():
    """Inspect or clear the goal link cache."""
    pass


@cache.command("list")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def cache_list(settings: GoalReplaySettings, output_json: bool):
    """List cached goals."""
    store = create_cache(settings)
    try:
        entries = []
        for key in store.keys():
            outcome = store.get(key)
            if outcome is not None:
                entries.append((key, outcome))
    finally:
        store.close()

    if output_json:
        click.echo(json.dumps([outcome.model_dump(mode="json") for _, outcome in entries], indent=2))
        return

    if not entries:
        click.echo("No goals currently cached.")
        return

    click.echo(f"Cached goals ({len(entries)} total):\n")
    for key, outcome in entries:
        if outcome.status == ResolutionStatus.FOUND:
            click.echo(f"  {key}  FOUND      {outcome.url}  ({outcome.title})")
        else:
            click.echo(f"  {key}  NOT FOUND")


@cache.command("clear")
@click.option("--match", "match_id", type=int, help="Match ID to clear")
@click.option("--minute", type=int, help="Goal minute to clear (with --match)")
@click.option("--all", "clear_all", is_flag=True, help="Clear every cached goal")
@click.pass_obj
def cache_clear(settings: GoalReplaySettings, match_id: int | None, minute: int | None, clear_all: bool):
    """Clear cached goals so they are searched again."""
    if not clear_all and (match_id is None or minute is None):
        raise click.UsageError("Pass --match and --minute, or --all")

    store = create_cache(settings)
    try:
        if clear_all:
            count = store.clear_all()
            click.echo(f"Cleared {count} cached goal(s)")
            return

        key = GoalKey(match_id=match_id, minute=minute)
        if store.clear(key):
            click.echo(f"Cleared goal {key}")
        else:
            click.echo(f"Goal {key} was not cached")
    finally:
        store.close()


@cli.command()
@click.argument("match_id", type=int)
@click.argument("minute", type=int)
@click.argument("home_team")
@click.argument("away_team")
@click.option(
    "--scorer",
    type=click.Choice(["home", "away"]),
    required=True,
    help="Which side scored",
)
@click.option(
    "--kickoff",
    required=True,
    help="Kickoff time (ISO 8601)",
)
@click.pass_obj
def resolve(
    settings: GoalReplaySettings,
    match_id: int,
    minute: int,
    home_team: str,
    away_team: str,
    scorer: str,
    kickoff: str,
):
    """Resolve one goal to a clip link."""
    from goalreplay.client import GoalReplayClient

    try:
        match_time = datetime.fromisoformat(kickoff.replace("Z", "+00:00"))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--kickoff") from e

    goal = GoalEvent(
        match_id=match_id,
        minute=minute,
        home_team=home_team,
        away_team=away_team,
        is_home_team=scorer == "home",
        match_time=match_time,
    )

    try:
        with GoalReplayClient(settings) as client:
            link = client.resolve_one(goal)
    except GoalReplayError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if link is None:
        click.echo("No link found")
        sys.exit(2)

    click.echo(link.url)
    if link.title:
        click.echo(f"  {link.title}")
    if link.post_url:
        click.echo(f"  {link.post_url}")


if __name__ == "__main__":
    cli()
