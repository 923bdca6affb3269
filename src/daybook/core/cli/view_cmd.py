"""daybook search / calendar / tags / trend / prompt."""

from __future__ import annotations

from datetime import date

import click

from daybook.core.exceptions import DaybookError
from daybook.journal.calendar import MonthCursor, weekday_headers
from daybook.journal.models import mood_emoji
from daybook.journal.prompts import PromptLibrary
from daybook.journal.search import FilterSpec, content_preview, filter_entries
from daybook.journal.trends import average_mood, mood_trend, writing_progress

from .common import MOOD_CHOICE, format_entry_line


@click.command()
@click.argument("query", required=False, default="")
@click.option("--mood", "-m", type=MOOD_CHOICE, default=None)
@click.option("--tag", default=None)
@click.option("--from", "start", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--to", "end", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--last", "last_days", type=int, default=None, help="Only the last N days.")
@click.pass_obj
def search(obj, query, mood, tag, start, end, last_days) -> None:
    """Find entries by text, mood, tag and date range."""
    if last_days is not None:
        spec = FilterSpec.last_days(last_days, query=query, mood=mood, tag=tag)
    else:
        spec = FilterSpec(
            query=query,
            mood=mood,
            tag=tag,
            start_date=start.date() if start else None,
            end_date=end.date() if end else None,
        )
    results = filter_entries(obj.store.list_entries(), spec)
    click.echo(f"{len(results)} matching entr{'y' if len(results) == 1 else 'ies'}")
    for entry in results:
        click.echo(format_entry_line(entry))
        preview = content_preview(entry.content, 80)
        if preview:
            click.echo(f"    {preview}")


@click.command()
@click.argument("year", type=int, required=False)
@click.argument("month", type=click.IntRange(1, 12), required=False)
@click.pass_obj
def calendar(obj, year: int | None, month: int | None) -> None:
    """Show a month with mood markers on days that have entries."""
    today = date.today()
    cursor = MonthCursor(year=year or today.year, month=month or today.month)
    grid = cursor.grid(obj.store.list_entries(), today=today)

    click.echo(cursor.title.center(7 * 5))
    click.echo("".join(f"{name:>5}" for name in weekday_headers()))
    for row_start in range(0, len(grid), 7):
        cells = []
        for cell in grid[row_start : row_start + 7]:
            label = "" if cell.other_month else str(cell.day)
            marker = "*" if cell.has_entries and not cell.other_month else " "
            if cell.is_today and not cell.other_month:
                label = f"[{label}]"
            cells.append(f"{label + marker:>5}")
        click.echo("".join(cells))

    for cell in grid:
        if cell.has_entries and not cell.other_month:
            moods = " ".join(mood_emoji(m) for m in cell.moods)
            click.echo(f"{cell.date.isoformat()}  {moods}  ({len(cell.entries)})")


@click.group(invoke_without_command=True)
@click.pass_context
def tags(ctx: click.Context) -> None:
    """List or delete tags."""
    if ctx.invoked_subcommand is None:
        registry = ctx.obj.store.list_tags()
        if not registry:
            click.echo("No tags.")
        for tag in registry:
            click.echo(f"{tag}  ({len(ctx.obj.store.entries_with_tag(tag))})")


@tags.command("delete")
@click.argument("tag")
@click.pass_obj
def delete_tag(obj, tag: str) -> None:
    """Delete a tag and remove it from every entry."""
    try:
        removed = obj.store.delete_tag(tag)
    except DaybookError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Deleted tag '{tag}'" if removed else f"No tag '{tag}'")


@click.command()
@click.pass_obj
def trend(obj) -> None:
    """Mood over time and progress toward writing goals."""
    entries = obj.store.list_entries()
    points = mood_trend(entries)
    if not points:
        click.echo("Need at least two entries to show a trend.")
    for point in points:
        click.echo(f"{point.label:>7}  {'#' * point.score:<5}  {mood_emoji(point.mood)} {point.mood}")
    avg = average_mood(entries)
    if avg is not None:
        click.echo(f"Average mood: {avg:.1f}/5")

    goals = obj.store.get_settings().writing_goals
    for progress in writing_progress(entries, goals).values():
        done = "done" if progress.met else f"{progress.ratio:.0%}"
        click.echo(f"{progress.period:>8}: {progress.words}/{progress.target} words ({done})")


@click.command()
@click.option("--quote", "kind", flag_value="quote", help="Show a quote instead.")
@click.option("--gratitude", "kind", flag_value="gratitude", help="Show a gratitude prompt.")
def prompt(kind: str | None) -> None:
    """Print a random writing prompt."""
    library = PromptLibrary()
    if kind == "quote":
        quote = library.random_quote()
        click.echo(f'"{quote.text}" - {quote.author}')
    elif kind == "gratitude":
        click.echo(library.random_gratitude_prompt())
    else:
        click.echo(library.random_prompt())
