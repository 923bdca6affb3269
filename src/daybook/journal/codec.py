"""Entity codec: journal objects <-> the backing store's JSON text.

Keys are camelCase to stay readable by the earlier web client that wrote
the same four store keys. Timestamps are ISO-8601 strings.

Decoding never raises. A missing or unparseable payload decodes to the
empty/default value for its kind and is logged; a malformed item inside an
otherwise valid entry list is skipped on its own. Unknown extra keys are
dropped on decode, so they do not survive a load/save cycle.

Encoding raises :class:`~daybook.core.exceptions.CodecError` when an object
cannot be represented (for example a non-datetime ``date``).
"""

from __future__ import annotations

import json
import math
from datetime import datetime
from typing import Any

from loguru import logger

from daybook.core.exceptions import CodecError

from .models import (
    FontSettings,
    JournalDraft,
    JournalEntry,
    UserSettings,
    WritingGoals,
    unique_tags,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _format_datetime(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    if not isinstance(dt, datetime):
        raise CodecError(f"Expected datetime, got {type(dt).__name__}")
    return dt.isoformat()


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _loads(payload: str | None, kind: str) -> Any:
    """Parse JSON text, returning None for missing or corrupt payloads."""
    if payload is None or not payload.strip():
        return None
    try:
        return json.loads(payload)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning(f"Discarding unparseable {kind} payload: {e}")
        return None


def _dumps(obj: Any) -> str:
    try:
        return json.dumps(obj, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise CodecError(f"Cannot serialize: {e}") from e


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None]


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------


def entry_to_dict(entry: JournalEntry) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": entry.id,
        "title": entry.title,
        "content": entry.content,
        "mood": str(entry.mood),
        "activities": list(entry.activities),
        "tags": list(entry.tags),
        "date": _format_datetime(entry.date),
        "wordCount": entry.word_count,
        "isGratitudeEntry": entry.is_gratitude_entry,
    }
    if entry.gratitude_items:
        data["gratitudeItems"] = list(entry.gratitude_items)
    if entry.last_edited is not None:
        data["lastEdited"] = _format_datetime(entry.last_edited)
    return data


def entry_from_dict(data: dict[str, Any]) -> JournalEntry:
    """Build an entry from its stored form. Raises ValueError/KeyError/TypeError if malformed."""
    if not isinstance(data, dict):
        raise TypeError(f"Entry must be an object, got {type(data).__name__}")
    date = _parse_datetime(data["date"])
    if date is None:
        raise ValueError("Entry has no date")
    word_count = data.get("wordCount", 0)
    return JournalEntry(
        id=str(data["id"]),
        title=str(data["title"]),
        content=str(data.get("content") or ""),
        mood=str(data["mood"]),
        date=date,
        activities=_str_list(data.get("activities")),
        tags=_str_list(data.get("tags")),
        word_count=word_count if isinstance(word_count, int) else 0,
        is_gratitude_entry=bool(data.get("isGratitudeEntry", False)),
        gratitude_items=_str_list(data.get("gratitudeItems")) or None,
        last_edited=_parse_datetime(data.get("lastEdited")),
    )


def encode_entry(entry: JournalEntry) -> str:
    return _dumps(entry_to_dict(entry))


def decode_entry(payload: str | None) -> JournalEntry | None:
    data = _loads(payload, "entry")
    if data is None:
        return None
    try:
        return entry_from_dict(data)
    except (KeyError, ValueError, TypeError, OverflowError) as e:
        logger.warning(f"Discarding malformed entry: {e}")
        return None


def encode_entries(entries) -> str:
    return _dumps([entry_to_dict(e) for e in entries])


def decode_entries(payload: str | None) -> list[JournalEntry]:
    data = _loads(payload, "entries")
    if data is None:
        return []
    if not isinstance(data, list):
        logger.warning(f"Discarding entries payload: expected a list, got {type(data).__name__}")
        return []

    entries: list[JournalEntry] = []
    for i, item in enumerate(data):
        try:
            entries.append(entry_from_dict(item))
        except (KeyError, ValueError, TypeError, OverflowError) as e:
            logger.warning(f"Skipping malformed entry at index {i}: {e}")
    return entries


# ---------------------------------------------------------------------------
# Draft
# ---------------------------------------------------------------------------


def encode_draft(draft: JournalDraft) -> str:
    return _dumps(
        {
            "id": draft.id,
            "title": draft.title,
            "content": draft.content,
            "mood": str(draft.mood) if draft.mood else None,
            "activities": list(draft.activities),
            "tags": list(draft.tags),
            "lastSaved": _format_datetime(draft.last_saved),
        }
    )


def decode_draft(payload: str | None) -> JournalDraft | None:
    data = _loads(payload, "draft")
    if data is None:
        return None
    try:
        if not isinstance(data, dict):
            raise TypeError(f"Draft must be an object, got {type(data).__name__}")
        return JournalDraft(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            content=str(data.get("content") or ""),
            mood=data.get("mood") or None,
            activities=_str_list(data.get("activities")),
            tags=_str_list(data.get("tags")),
            last_saved=_parse_datetime(data.get("lastSaved")),
        )
    except (KeyError, ValueError, TypeError, OverflowError) as e:
        logger.warning(f"Discarding malformed draft: {e}")
        return None


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------


def encode_tags(tags) -> str:
    return _dumps(list(tags))


def decode_tags(payload: str | None) -> list[str]:
    data = _loads(payload, "tags")
    if data is None:
        return []
    if not isinstance(data, list):
        logger.warning(f"Discarding tags payload: expected a list, got {type(data).__name__}")
        return []
    return unique_tags(v for v in data if isinstance(v, str))


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def settings_to_dict(settings: UserSettings) -> dict[str, Any]:
    return {
        "theme": settings.theme,
        "font": {"family": settings.font.family, "size": settings.font.size},
        "writingGoals": {
            "daily": settings.writing_goals.daily,
            "weekly": settings.writing_goals.weekly,
            "monthly": settings.writing_goals.monthly,
        },
        "showPrompts": settings.show_prompts,
        "autosaveInterval": settings.autosave_interval,
    }


def encode_settings(settings: UserSettings) -> str:
    return _dumps(settings_to_dict(settings))


def decode_settings(payload: str | None) -> UserSettings:
    """Decode settings, filling anything missing or invalid from the defaults."""
    data = _loads(payload, "settings")
    if data is None:
        return UserSettings.default()
    if not isinstance(data, dict):
        logger.warning(f"Discarding settings payload: expected an object, got {type(data).__name__}")
        return UserSettings.default()

    defaults = UserSettings.default()
    font = data.get("font") if isinstance(data.get("font"), dict) else {}
    goals = data.get("writingGoals") if isinstance(data.get("writingGoals"), dict) else {}
    return UserSettings(
        theme=_as_str(data.get("theme"), defaults.theme),
        font=FontSettings(
            family=_as_str(font.get("family"), defaults.font.family),
            size=_as_str(font.get("size"), defaults.font.size),
        ),
        writing_goals=WritingGoals(
            daily=_as_int(goals.get("daily"), defaults.writing_goals.daily),
            weekly=_as_int(goals.get("weekly"), defaults.writing_goals.weekly),
            monthly=_as_int(goals.get("monthly"), defaults.writing_goals.monthly),
        ),
        show_prompts=_as_bool(data.get("showPrompts"), defaults.show_prompts),
        autosave_interval=_as_int(data.get("autosaveInterval"), defaults.autosave_interval),
    )


def _as_str(value: Any, default: str) -> str:
    return value if isinstance(value, str) and value else default


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return default
    if isinstance(value, float) and not math.isfinite(value):
        return default
    return int(value)


def _as_bool(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default
