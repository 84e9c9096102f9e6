"""Journal data model and bridge request/response value objects."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from dayone_mcp.errors import ValidationError


class Action(str, Enum):
    """Closed set of bridge operations."""

    LIST_JOURNALS = "list_journals"
    CREATE_ENTRY = "create_entry"
    GET_ENTRIES = "get_entries"
    UPDATE_ENTRY = "update_entry"

    @classmethod
    def parse(cls, value: Any) -> Action:
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(f"Unknown action: {value}") from None


DEFAULT_LIMIT = 10
MAX_LIMIT = 50


def split_list(value: Any) -> list[str] | None:
    """Normalize a comma-joined string or a list of strings.

    Elements are whitespace-trimmed and kept in order. Empty elements are
    preserved; an empty or missing value means the field is absent.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return [item.strip() for item in value.split(",")]
    if isinstance(value, Sequence):
        return [str(item).strip() for item in value]
    raise ValidationError(f"Expected a comma-separated string or list, got {type(value).__name__}")


def join_list(values: Sequence[str] | None) -> str | None:
    if values is None:
        return None
    return ",".join(values)


def _optional_str(params: Mapping[str, Any], key: str) -> str | None:
    value = params.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value


def _optional_bool(params: Mapping[str, Any], key: str) -> bool | None:
    value = params.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ValidationError(f"{key} must be a boolean")
    return value


def _optional_int(params: Mapping[str, Any], key: str) -> int | None:
    value = params.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{key} must be a number") from None


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    return max(0, min(limit, MAX_LIMIT))


@dataclass(frozen=True)
class Journal:
    id: str
    name: str
    mcp_access_allowed: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "mcpAccessAllowed": self.mcp_access_allowed,
        }


@dataclass(frozen=True)
class Entry:
    """A journal entry. ``id`` is assigned by Day One and never changes."""

    id: str
    text: str
    date: str | None
    journal_id: str | None = None
    tags: list[str] | None = None
    starred: bool | None = None
    all_day: bool | None = None
    attachments: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "date": self.date,
        }
        if self.journal_id is not None:
            payload["journalId"] = self.journal_id
        if self.tags is not None:
            payload["tags"] = list(self.tags)
        if self.starred is not None:
            payload["starred"] = self.starred
        if self.all_day is not None:
            payload["allDay"] = self.all_day
        if self.attachments is not None:
            payload["attachments"] = list(self.attachments)
        return payload


@dataclass(frozen=True)
class CreateEntryParams:
    text: str
    journal_id: str | None = None
    journal_name: str | None = None
    date: str | None = None
    tags: list[str] | None = None
    attachments: list[str] | None = None
    starred: bool | None = None
    all_day: bool | None = None

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> CreateEntryParams:
        text = params.get("text")
        if not text:
            raise ValidationError("Missing required parameter: text")
        if not isinstance(text, str):
            raise ValidationError("text must be a string")
        return cls(
            text=text,
            journal_id=_optional_str(params, "journal_id"),
            journal_name=_optional_str(params, "journal_name"),
            date=_optional_str(params, "date"),
            tags=split_list(params.get("tags")),
            attachments=split_list(params.get("attachments")),
            starred=_optional_bool(params, "starred"),
            all_day=_optional_bool(params, "all_day"),
        )


@dataclass(frozen=True)
class GetEntriesParams:
    query: str | None = None
    journal_ids: list[str] | None = None
    journal_names: list[str] | None = None
    start_date: str | None = None
    end_date: str | None = None
    on_this_day: str | None = None
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> GetEntriesParams:
        offset = _optional_int(params, "offset") or 0
        return cls(
            query=_optional_str(params, "query"),
            journal_ids=split_list(params.get("journal_ids")),
            journal_names=split_list(params.get("journal_names")),
            start_date=_optional_str(params, "start_date"),
            end_date=_optional_str(params, "end_date"),
            on_this_day=_optional_str(params, "on_this_day"),
            limit=clamp_limit(_optional_int(params, "limit")),
            offset=max(0, offset),
        )


@dataclass(frozen=True)
class UpdateEntryParams:
    entry_id: str
    journal_id: str | None = None
    text: str | None = None
    tags: list[str] | None = None
    attachments: list[str] | None = None
    starred: bool | None = None
    all_day: bool | None = None

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> UpdateEntryParams:
        entry_id = params.get("entry_id")
        if not entry_id:
            raise ValidationError("Missing required parameter: entry_id")
        if not isinstance(entry_id, str):
            raise ValidationError("entry_id must be a string")
        # Positional argument of `edit`; a leading dash would parse as a flag.
        if entry_id.startswith("-"):
            raise ValidationError(f"entry_id cannot start with '-': {entry_id}")
        return cls(
            entry_id=entry_id,
            journal_id=_optional_str(params, "journal_id"),
            text=_optional_str(params, "text"),
            tags=split_list(params.get("tags")),
            attachments=split_list(params.get("attachments")),
            starred=_optional_bool(params, "starred"),
            all_day=_optional_bool(params, "all_day"),
        )


@dataclass(frozen=True)
class BridgeRequest:
    action: Action
    params: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"action": self.action.value, "params": self.params}


@dataclass(frozen=True)
class BridgeResponse:
    success: bool
    data: Any = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            payload["data"] = self.data
        if self.error is not None:
            payload["error"] = self.error
        return payload
