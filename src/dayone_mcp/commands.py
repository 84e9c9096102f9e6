"""Argument-vector construction for the Day One CLI.

Every dynamic value becomes its own argv element and entry text travels on
stdin, so nothing is ever interpreted by a shell.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from dayone_mcp.models import CreateEntryParams, GetEntriesParams, UpdateEntryParams

DEFAULT_CLI_PATH = "/usr/local/bin/dayone"


@dataclass(frozen=True)
class Invocation:
    """A CLI call: argv plus optional text for the child's stdin."""

    argv: list[str]
    stdin: str | None = None

    @property
    def subcommand(self) -> str:
        return self.argv[1] if len(self.argv) > 1 else ""


def _repeat(flag: str, values: Iterable[str]) -> list[str]:
    args: list[str] = []
    for value in values:
        args.extend([flag, value])
    return args


class ShellCommandBuilder:
    """Build ``dayone`` invocations from typed parameters."""

    def __init__(self, cli_path: str = DEFAULT_CLI_PATH) -> None:
        self.cli_path = cli_path

    def version(self) -> Invocation:
        return Invocation([self.cli_path, "--version"])

    def create_entry(self, params: CreateEntryParams) -> Invocation:
        """Build ``dayone new``.

        Journal name wins over journal id; only one selector is emitted.
        """
        argv = [self.cli_path, "new"]
        if params.journal_name:
            argv.extend(["--journal", params.journal_name])
        elif params.journal_id:
            argv.extend(["--journal-id", params.journal_id])
        if params.date:
            argv.extend(["--date", params.date])
        if params.tags is not None:
            argv.extend(_repeat("--tags", params.tags))
        if params.starred:
            argv.append("--starred")
        if params.all_day:
            argv.append("--all-day")
        if params.attachments is not None:
            argv.extend(_repeat("--photo", params.attachments))
        return Invocation(argv, stdin=params.text)

    def get_entries(self, params: GetEntriesParams) -> Invocation:
        argv = [self.cli_path, "export", "--type", "json"]
        if params.journal_names is not None:
            argv.extend(_repeat("--journal", params.journal_names))
        elif params.journal_ids is not None:
            argv.extend(_repeat("--journal-id", params.journal_ids))
        if params.start_date:
            argv.extend(["--after", params.start_date])
        if params.end_date:
            argv.extend(["--before", params.end_date])
        if params.on_this_day:
            argv.extend(["--on-this-day", params.on_this_day])
        return Invocation(argv)

    def update_entry(self, params: UpdateEntryParams) -> Invocation:
        """Build ``dayone edit <entry_id>``.

        ``starred`` is tri-state: ``None`` leaves the flag alone, ``False``
        emits ``--unstarred``. Text is sent on stdin only when given.
        """
        argv = [self.cli_path, "edit", params.entry_id]
        if params.journal_id:
            argv.extend(["--journal-id", params.journal_id])
        if params.tags is not None:
            argv.extend(_repeat("--tags", params.tags))
        if params.starred is not None:
            argv.append("--starred" if params.starred else "--unstarred")
        if params.all_day:
            argv.append("--all-day")
        if params.attachments is not None:
            argv.extend(_repeat("--photo", params.attachments))
        return Invocation(argv, stdin=params.text or None)
