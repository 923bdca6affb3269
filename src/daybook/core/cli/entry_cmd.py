"""daybook add / list / show / edit / delete."""

from __future__ import annotations

from dataclasses import replace

import click

from daybook.core.exceptions import DaybookError
from daybook.core.utils.text import strip_html
from daybook.journal.models import JournalEntry, mood_emoji

from .common import DATE_FORMATS, MOOD_CHOICE, format_date, format_entry_line, require_entry


@click.command()
@click.option("--title", "-t", required=True, help="Entry title.")
@click.option("--mood", "-m", type=MOOD_CHOICE, required=True, help="How you feel.")
@click.option("--content", "-c", default=None, help="Entry text (HTML allowed). Read from stdin when omitted.")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable).")
@click.option("--activity", "activities", multiple=True, help="Activity (repeatable).")
@click.option("--grateful", "gratitude_items", multiple=True, help="Gratitude item (repeatable).")
@click.option("--date", "entry_date", type=click.DateTime(formats=DATE_FORMATS), default=None, help="Defaults to now.")
@click.pass_obj
def add(obj, title, mood, content, tags, activities, gratitude_items, entry_date) -> None:
    """Write a new journal entry."""
    if content is None:
        content = click.get_text_stream("stdin").read()
    if not content.strip():
        raise click.UsageError("Entry content is empty.")

    try:
        entry = JournalEntry.create(
            title=title,
            content=content,
            mood=mood,
            date=entry_date,
            activities=list(activities),
            tags=list(tags),
            is_gratitude_entry=bool(gratitude_items),
            gratitude_items=list(gratitude_items),
        )
        stored = obj.store.add_entry(entry)
    except ValueError as e:
        raise click.UsageError(str(e)) from e
    except DaybookError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Saved {stored.id} ({stored.word_count} words)")


@click.command("list")
@click.option("--limit", "-n", type=int, default=20, show_default=True)
@click.pass_obj
def list_cmd(obj, limit: int) -> None:
    """List entries, newest first."""
    entries = obj.store.list_entries()
    if not entries:
        click.echo("No entries yet.")
        return
    for entry in entries[:limit]:
        click.echo(format_entry_line(entry))


@click.command()
@click.argument("entry_id")
@click.pass_obj
def show(obj, entry_id: str) -> None:
    """Print one entry."""
    entry = require_entry(obj.store, entry_id)
    click.echo(f"{mood_emoji(entry.mood)} {entry.title}")
    click.echo(f"{format_date(entry.date)} {entry.date:%H:%M}  ·  {entry.mood}  ·  {entry.word_count} words")
    if entry.tags:
        click.echo(f"Tags: {', '.join(entry.tags)}")
    if entry.activities:
        click.echo(f"Activities: {', '.join(entry.activities)}")
    click.echo("")
    click.echo(strip_html(entry.content))
    if entry.gratitude_items:
        click.echo("")
        click.echo("Grateful for:")
        for item in entry.gratitude_items:
            click.echo(f"  - {item}")
    if entry.last_edited:
        click.echo(f"\n(edited {format_date(entry.last_edited)} {entry.last_edited:%H:%M})")


@click.command()
@click.argument("entry_id")
@click.option("--title", "-t", default=None)
@click.option("--mood", "-m", type=MOOD_CHOICE, default=None)
@click.option("--content", "-c", default=None)
@click.option("--tag", "tags", multiple=True, help="Replace tags (repeatable).")
@click.option("--activity", "activities", multiple=True, help="Replace activities (repeatable).")
@click.pass_obj
def edit(obj, entry_id, title, mood, content, tags, activities) -> None:
    """Change fields of an existing entry."""
    entry = require_entry(obj.store, entry_id)
    changes = {
        key: value
        for key, value in {
            "title": title,
            "mood": mood,
            "content": content,
            "tags": list(tags) or None,
            "activities": list(activities) or None,
        }.items()
        if value is not None
    }
    if not changes:
        click.echo("Nothing to change.")
        return
    try:
        obj.store.update_entry(replace(entry, **changes))
    except ValueError as e:
        raise click.UsageError(str(e)) from e
    except DaybookError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Updated {entry_id}")


@click.command()
@click.argument("entry_id")
@click.option("--yes", is_flag=True, help="Don't ask for confirmation.")
@click.pass_obj
def delete(obj, entry_id: str, yes: bool) -> None:
    """Delete an entry."""
    entry = require_entry(obj.store, entry_id)
    if not yes:
        click.confirm(f"Delete '{entry.title}'?", abort=True)
    try:
        obj.store.delete_entry(entry_id)
    except DaybookError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Deleted {entry_id}")
