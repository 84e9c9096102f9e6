"""Decode Day One CLI output into entries."""

from __future__ import annotations

import json
from typing import Any

from dayone_mcp.errors import ParseError
from dayone_mcp.models import Entry


def _first(item: dict[str, Any], *keys: str) -> Any:
    # Falsy values fall through to the next key, matching the export format's
    # habit of emitting empty strings for unset fields.
    for key in keys:
        value = item.get(key)
        if value:
            return value
    return None


def _tags(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(tag) for tag in value]


def _attachment_ref(photo: Any) -> str | None:
    if isinstance(photo, dict):
        return _first(photo, "identifier", "path")
    if isinstance(photo, str):
        return photo
    return None


def parse_entry(item: dict[str, Any]) -> Entry:
    photos = item.get("photos") or []
    attachments = [ref for ref in (_attachment_ref(photo) for photo in photos) if ref]
    return Entry(
        id=_first(item, "uuid", "id") or "",
        text=item.get("text") or "",
        date=_first(item, "creationDate", "date"),
        journal_id=_first(item, "journalName", "journalId"),
        tags=_tags(item.get("tags")),
        starred=bool(item.get("starred", False)),
        all_day=bool(item.get("isAllDay", False)),
        attachments=attachments,
    )


def parse_export(output: str) -> list[Entry]:
    """Parse ``dayone export --type json`` output.

    Empty output means no entries. Anything that is not valid JSON raises
    ``ParseError``; no partial result is returned.
    """
    if not output.strip():
        return []
    try:
        data = json.loads(output)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON from Day One export: {exc}") from exc
    if not isinstance(data, dict):
        return []
    items = data.get("entries")
    if not isinstance(items, list):
        return []
    return [parse_entry(item) for item in items if isinstance(item, dict)]


def parse_created_id(output: str) -> str:
    """``dayone new`` prints the new entry's UUID and nothing else."""
    return output.strip()
