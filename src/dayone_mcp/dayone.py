"""Journal operations backed by the Day One CLI."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from dayone_mcp.commands import DEFAULT_CLI_PATH, ShellCommandBuilder
from dayone_mcp.errors import ExecutionError
from dayone_mcp.models import (
    Action,
    CreateEntryParams,
    Entry,
    GetEntriesParams,
    Journal,
    UpdateEntryParams,
)
from dayone_mcp.parser import parse_created_id, parse_export
from dayone_mcp.runner import CommandRunner

logger = logging.getLogger("dayone_mcp.dayone")

AVAILABILITY_TIMEOUT = 10

# The CLI has no journal listing command.
DEFAULT_JOURNAL = Journal(id="default", name="Journal", mcp_access_allowed=True)


def _failure(what: str, exc: ExecutionError) -> ExecutionError:
    return ExecutionError(
        f"Failed to {what}: {exc.message}",
        stderr=exc.stderr,
        returncode=exc.returncode,
    )


def utc_now_iso() -> str:
    """Current UTC time as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


class DayOneClient:
    """Build, run, and parse one CLI invocation per operation."""

    def __init__(
        self,
        cli_path: str = DEFAULT_CLI_PATH,
        runner: CommandRunner | None = None,
        now: Callable[[], str] = utc_now_iso,
    ) -> None:
        self.cli_path = cli_path
        self.builder = ShellCommandBuilder(cli_path)
        self.runner = runner or CommandRunner()
        self._now = now

    def list_journals(self) -> list[Journal]:
        try:
            self.runner.run(self.builder.version())
        except ExecutionError as exc:
            raise _failure("list journals", exc) from exc
        return [DEFAULT_JOURNAL]

    def create_entry(self, params: CreateEntryParams) -> Entry:
        """Create an entry and echo the request back with the new id.

        The stored entry is not read back.
        """
        logger.debug("Creating entry: %s...", params.text[:40])
        try:
            output = self.runner.run(self.builder.create_entry(params))
        except ExecutionError as exc:
            raise _failure("create entry", exc) from exc
        return Entry(
            id=parse_created_id(output),
            text=params.text,
            date=params.date or self._now(),
            journal_id=params.journal_id,
            tags=params.tags,
            starred=params.starred,
            all_day=params.all_day,
            attachments=params.attachments,
        )

    def get_entries(self, params: GetEntriesParams) -> list[Entry]:
        """Export matching entries, then filter by ``query`` and paginate.

        The text filter is applied before ``offset``/``limit``.
        """
        try:
            output = self.runner.run(self.builder.get_entries(params))
            entries = parse_export(output)
        except ExecutionError as exc:
            raise _failure("get entries", exc) from exc

        if params.query:
            needle = params.query.lower()
            entries = [entry for entry in entries if needle in entry.text.lower()]
        return entries[params.offset : params.offset + params.limit]

    def update_entry(self, params: UpdateEntryParams) -> Entry:
        """Apply an edit. ``date`` in the result is the time of the call.

        Without a read-back step the returned entry reflects the request, not
        the stored state.
        """
        try:
            self.runner.run(self.builder.update_entry(params))
        except ExecutionError as exc:
            raise _failure("update entry", exc) from exc
        return Entry(
            id=params.entry_id,
            text=params.text or "",
            date=self._now(),
            journal_id=params.journal_id,
            tags=params.tags,
            starred=params.starred,
            all_day=params.all_day,
            attachments=params.attachments,
        )

    def check_availability(self) -> bool:
        """Probe ``dayone --version`` without waiting on in-flight writes. Never raises."""
        try:
            self.runner.run(
                self.builder.version(),
                timeout_seconds=AVAILABILITY_TIMEOUT,
                exclusive=False,
            )
        except Exception as exc:
            logger.debug("Day One CLI unavailable: %s", exc)
            return False
        return True

    def perform(self, action: Action, params: dict[str, Any]) -> Any:
        """Run ``action`` and return its JSON-ready result."""
        if action is Action.LIST_JOURNALS:
            return [journal.to_dict() for journal in self.list_journals()]
        if action is Action.CREATE_ENTRY:
            return self.create_entry(CreateEntryParams.from_dict(params)).to_dict()
        if action is Action.GET_ENTRIES:
            return [entry.to_dict() for entry in self.get_entries(GetEntriesParams.from_dict(params))]
        if action is Action.UPDATE_ENTRY:
            return self.update_entry(UpdateEntryParams.from_dict(params)).to_dict()
        raise ValueError(f"Unhandled action: {action}")
