"""daybook settings: show or change user settings."""

from __future__ import annotations

from dataclasses import replace

import click

from daybook.core.exceptions import DaybookError
from daybook.journal.models import FontSettings, UserSettings, WritingGoals
from daybook.journal.themes import FONT_SIZES, THEMES


@click.group(invoke_without_command=True)
@click.pass_context
def settings(ctx: click.Context) -> None:
    """Show or change settings."""
    if ctx.invoked_subcommand is None:
        current = ctx.obj.store.get_settings()
        click.echo(f"theme:             {current.theme}")
        click.echo(f"font:              {current.font.family} ({current.font.size})")
        goals = current.writing_goals
        click.echo(f"writing goals:     {goals.daily}/day, {goals.weekly}/week, {goals.monthly}/month")
        click.echo(f"show prompts:      {'yes' if current.show_prompts else 'no'}")
        click.echo(f"autosave interval: {current.autosave_interval}s")


@settings.command("set")
@click.option("--theme", type=click.Choice([t.name.lower() for t in THEMES]), default=None)
@click.option("--font", "font_family", default=None)
@click.option("--font-size", type=click.Choice([value for _, value in FONT_SIZES]), default=None)
@click.option("--daily-goal", type=click.IntRange(min=0), default=None)
@click.option("--weekly-goal", type=click.IntRange(min=0), default=None)
@click.option("--monthly-goal", type=click.IntRange(min=0), default=None)
@click.option("--prompts/--no-prompts", "show_prompts", default=None)
@click.option("--autosave", "autosave_interval", type=int, default=None, help="Seconds (clamped to 5-300).")
@click.pass_obj
def set_settings(
    obj, theme, font_family, font_size, daily_goal, weekly_goal, monthly_goal, show_prompts, autosave_interval
) -> None:
    """Update one or more settings."""
    store = obj.store
    current = store.get_settings()
    updated = replace(
        current,
        theme=theme or current.theme,
        font=FontSettings(family=font_family or current.font.family, size=font_size or current.font.size),
        writing_goals=WritingGoals(
            daily=current.writing_goals.daily if daily_goal is None else daily_goal,
            weekly=current.writing_goals.weekly if weekly_goal is None else weekly_goal,
            monthly=current.writing_goals.monthly if monthly_goal is None else monthly_goal,
        ),
        show_prompts=current.show_prompts if show_prompts is None else show_prompts,
        autosave_interval=current.autosave_interval if autosave_interval is None else autosave_interval,
    )
    try:
        saved = store.update_settings(updated)
    except DaybookError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Settings saved (autosave every {saved.autosave_interval}s)")


@settings.command("reset")
@click.pass_obj
def reset_settings(obj) -> None:
    """Restore default settings."""
    try:
        obj.store.update_settings(UserSettings.default())
    except DaybookError as e:
        raise click.ClickException(str(e)) from e
    click.echo("Settings reset to defaults")
