from __future__ import annotations

import asyncio

import click
from flask.cli import AppGroup

from .errors import ValidationError
from .roster import participant_collection, role_collection
from .services.assignments import assign
from .services.reveal import AsyncioScheduler, RevealController
from .session_state import configuration_store, reveal_settings

roles_cli = AppGroup("roles", help="Shuffle roles and inspect saved teams.")


def _echo_assignment(participants, final: bool) -> None:
    width = max(len(p.name) for p in participants)
    if final:
        click.echo("")
    for p in participants:
        line = f"{p.name.ljust(width)}  {p.assigned_role or 'Unassigned'}"
        click.echo(click.style(line, bold=final))
    if not final:
        click.echo("---")


async def _play_reveal(participants, roles, ticks: int, interval_ms: int):
    done = asyncio.get_running_loop().create_future()
    controller = RevealController(
        on_frame=lambda frame: _echo_assignment(frame, final=not controller.is_shuffling),
        scheduler=AsyncioScheduler(),
        ticks=ticks,
        interval_ms=interval_ms,
        on_complete=done.set_result,
    )
    controller.start(participants, roles)
    try:
        return await done
    finally:
        controller.cancel()


@roles_cli.command("shuffle")
@click.option("-p", "--participant", "participant_names", multiple=True, help="Team member name (repeatable).")
@click.option("-r", "--role", "role_names", multiple=True, help="Role name (repeatable).")
@click.option("--team", "team_id", default=None, help="Use a saved team instead of -p/-r.")
@click.option("--animate/--no-animate", default=True, help="Play the staged reveal before the result.")
def shuffle_command(participant_names, role_names, team_id, animate):
    """Randomly assign roles to team members."""
    if team_id:
        saved = configuration_store().get(team_id)
        if saved is None:
            raise click.ClickException(f"No saved team with id {team_id}")
        participants, roles = list(saved.participants), list(saved.roles)
    else:
        try:
            members = participant_collection()
            for name in participant_names:
                members.add(name)
            role_set = role_collection()
            for name in role_names:
                role_set.add(name)
        except ValidationError as e:
            raise click.ClickException(f"{e.title}: {e.message}") from e
        participants, roles = list(members), list(role_set)

    try:
        if animate:
            ticks, interval_ms = reveal_settings()
            asyncio.run(_play_reveal(participants, roles, ticks, interval_ms))
        else:
            _echo_assignment(assign(participants, roles), final=True)
    except ValidationError as e:
        raise click.ClickException(f"{e.title}: {e.message}") from e


@roles_cli.command("teams")
def list_teams_command():
    """List saved team configurations."""
    saved = configuration_store().list()
    if not saved:
        click.echo("No saved teams yet")
        return
    for team in saved:
        click.echo(f"{team.id}  {team.name}  ({len(team.participants)} members, {len(team.roles)} roles)  {team.saved_at}")


@roles_cli.command("show-team")
@click.argument("team_id")
def show_team_command(team_id):
    """Print the members and roles of one saved team."""
    team = configuration_store().get(team_id)
    if team is None:
        raise click.ClickException(f"No saved team with id {team_id}")
    click.echo(f"{team.name} (saved {team.saved_at})")
    click.echo("Members: " + ", ".join(p.name for p in team.participants))
    click.echo("Roles: " + ", ".join(r.name for r in team.roles))
