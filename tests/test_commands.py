"""Tests for Day One CLI argument construction."""

from dayone_mcp.commands import Invocation, ShellCommandBuilder
from dayone_mcp.models import CreateEntryParams, GetEntriesParams, UpdateEntryParams

CLI = "/usr/local/bin/dayone"


def _create(**params):
    return ShellCommandBuilder(CLI).create_entry(CreateEntryParams.from_dict(params))


def _update(**params):
    return ShellCommandBuilder(CLI).update_entry(UpdateEntryParams.from_dict(params))


def _get(**params):
    return ShellCommandBuilder(CLI).get_entries(GetEntriesParams.from_dict(params))


class TestCreateEntry:
    def test_minimal_entry_sends_text_on_stdin(self):
        invocation = _create(text="Hello")

        assert invocation == Invocation([CLI, "new"], stdin="Hello")
        assert invocation.subcommand == "new"

    def test_special_characters_are_passed_verbatim(self):
        text = 'He said "hi" \\ then\nleft; $(rm -rf /) `whoami` \'quoted\''

        invocation = _create(text=text)

        assert invocation.stdin == text
        assert text not in invocation.argv

    def test_text_that_looks_like_a_flag_stays_off_argv(self):
        invocation = _create(text="--journal Secret")

        assert invocation.argv == [CLI, "new"]
        assert invocation.stdin == "--journal Secret"

    def test_journal_name_wins_over_id(self):
        invocation = _create(text="x", journal_name="Work", journal_id="abc")

        assert invocation.argv == [CLI, "new", "--journal", "Work"]
        assert "--journal-id" not in invocation.argv

    def test_journal_id_used_without_name(self):
        invocation = _create(text="x", journal_id="abc")

        assert invocation.argv == [CLI, "new", "--journal-id", "abc"]

    def test_tags_repeat_flag_in_order(self):
        invocation = _create(text="x", tags="b, a ,b")

        assert invocation.argv == [CLI, "new", "--tags", "b", "--tags", "a", "--tags", "b"]

    def test_empty_tag_elements_are_kept(self):
        invocation = _create(text="x", tags="a,,c")

        assert invocation.argv[2:] == ["--tags", "a", "--tags", "", "--tags", "c"]

    def test_tags_accept_a_list(self):
        invocation = _create(text="x", tags=["one", "two"])

        assert invocation.argv[2:] == ["--tags", "one", "--tags", "two"]

    def test_flags_and_attachments(self):
        invocation = _create(
            text="x",
            date="2025-08-20T15:30:00Z",
            starred=True,
            all_day=True,
            attachments="/tmp/a.jpg,/tmp/b.png",
        )

        assert invocation.argv == [
            CLI,
            "new",
            "--date",
            "2025-08-20T15:30:00Z",
            "--starred",
            "--all-day",
            "--photo",
            "/tmp/a.jpg",
            "--photo",
            "/tmp/b.png",
        ]

    def test_false_flags_emit_nothing(self):
        invocation = _create(text="x", starred=False, all_day=False)

        assert invocation.argv == [CLI, "new"]

    def test_custom_cli_path(self):
        invocation = ShellCommandBuilder("/opt/dayone").create_entry(
            CreateEntryParams(text="x")
        )

        assert invocation.argv[0] == "/opt/dayone"


class TestGetEntries:
    def test_default_export(self):
        invocation = _get()

        assert invocation == Invocation([CLI, "export", "--type", "json"])
        assert invocation.stdin is None

    def test_journal_names_win_over_ids(self):
        invocation = _get(journal_names="Work,Home", journal_ids="1,2")

        assert invocation.argv[4:] == ["--journal", "Work", "--journal", "Home"]

    def test_journal_ids(self):
        invocation = _get(journal_ids="1, 2")

        assert invocation.argv[4:] == ["--journal-id", "1", "--journal-id", "2"]

    def test_date_filters(self):
        invocation = _get(start_date="2025-01-01", end_date="2025-02-01", on_this_day="08-20")

        assert invocation.argv[4:] == [
            "--after",
            "2025-01-01",
            "--before",
            "2025-02-01",
            "--on-this-day",
            "08-20",
        ]

    def test_query_and_paging_never_reach_argv(self):
        invocation = _get(query="coffee", limit=5, offset=2)

        assert invocation.argv == [CLI, "export", "--type", "json"]


class TestUpdateEntry:
    def test_entry_id_is_positional(self):
        invocation = _update(entry_id="ABC123")

        assert invocation == Invocation([CLI, "edit", "ABC123"], stdin=None)

    def test_text_goes_to_stdin(self):
        invocation = _update(entry_id="ABC123", text="New\n\"body\"")

        assert invocation.stdin == "New\n\"body\""
        assert invocation.argv == [CLI, "edit", "ABC123"]

    def test_starred_true(self):
        assert _update(entry_id="E", starred=True).argv[3:] == ["--starred"]

    def test_starred_false_unstars(self):
        assert _update(entry_id="E", starred=False).argv[3:] == ["--unstarred"]

    def test_starred_absent_emits_nothing(self):
        assert _update(entry_id="E").argv == [CLI, "edit", "E"]

    def test_metadata_flags(self):
        invocation = _update(
            entry_id="E",
            journal_id="J",
            tags="x,y",
            all_day=True,
            attachments="/tmp/p.jpg",
        )

        assert invocation.argv == [
            CLI,
            "edit",
            "E",
            "--journal-id",
            "J",
            "--tags",
            "x",
            "--tags",
            "y",
            "--all-day",
            "--photo",
            "/tmp/p.jpg",
        ]


def test_version_invocation():
    assert ShellCommandBuilder(CLI).version() == Invocation([CLI, "--version"])
