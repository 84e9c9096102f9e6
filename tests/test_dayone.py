import json
import threading
from typing import Any

import pytest

from dayone_mcp.dayone import DEFAULT_JOURNAL, DayOneClient, utc_now_iso
from dayone_mcp.errors import ExecutionError, ValidationError
from dayone_mcp.models import (
    Action,
    CreateEntryParams,
    GetEntriesParams,
    UpdateEntryParams,
)

CLI = "/usr/local/bin/dayone"
NOW = "2025-08-20T15:30:00.000Z"


def _client() -> DayOneClient:
    return DayOneClient(CLI, now=lambda: NOW)


def _export(count: int, text: str = "entry") -> str:
    return json.dumps(
        {"entries": [{"uuid": f"E{i}", "text": f"{text} {i}"} for i in range(count)]}
    )


def test_utc_now_iso_format() -> None:
    stamp = utc_now_iso()

    assert stamp.endswith("Z")
    assert len(stamp) == len("2025-08-20T15:30:00.000Z")


def test_list_journals_probes_cli(mock_popen: Any) -> None:
    journals = _client().list_journals()

    assert journals == [DEFAULT_JOURNAL]
    assert mock_popen.call_args[0][0] == [CLI, "--version"]


def test_list_journals_failure(cli_output: Any) -> None:
    cli_output("", "not installed", returncode=127)

    with pytest.raises(ExecutionError, match="Failed to list journals: not installed"):
        _client().list_journals()


def test_create_entry_echoes_request(cli_output: Any) -> None:
    cli_output("NEW-UUID\n")

    entry = _client().create_entry(
        CreateEntryParams(text="Hello, World!", tags=["a"], starred=True)
    )

    assert entry.id == "NEW-UUID"
    assert entry.text == "Hello, World!"
    assert entry.date == NOW
    assert entry.tags == ["a"]
    assert entry.starred is True


def test_create_entry_keeps_given_date(cli_output: Any) -> None:
    cli_output("ID")

    entry = _client().create_entry(CreateEntryParams(text="x", date="2024-01-01T00:00:00Z"))

    assert entry.date == "2024-01-01T00:00:00Z"


def test_create_entry_failure_wraps_stderr(cli_output: Any) -> None:
    cli_output("", "Journal not found", returncode=1)

    with pytest.raises(ExecutionError) as exc_info:
        _client().create_entry(CreateEntryParams(text="x"))

    assert exc_info.value.message == "Failed to create entry: Journal not found"
    assert exc_info.value.returncode == 1


def test_get_entries_limit_clamped(cli_output: Any) -> None:
    cli_output(_export(60))

    entries = _client().get_entries(GetEntriesParams.from_dict({"limit": 1000}))

    assert len(entries) == 50
    assert entries[0].id == "E0"


def test_get_entries_offset_past_end(cli_output: Any) -> None:
    cli_output(_export(3))

    assert _client().get_entries(GetEntriesParams(offset=10)) == []


def test_get_entries_limit_zero(cli_output: Any) -> None:
    cli_output(_export(3))

    assert _client().get_entries(GetEntriesParams(limit=0)) == []


def test_get_entries_query_filters_before_paging(cli_output: Any) -> None:
    output = json.dumps(
        {
            "entries": [
                {"uuid": "A", "text": "Coffee at noon"},
                {"uuid": "B", "text": "tea"},
                {"uuid": "C", "text": "more COFFEE"},
                {"uuid": "D", "text": "coffee again"},
            ]
        }
    )
    cli_output(output)

    entries = _client().get_entries(GetEntriesParams(query="coffee", offset=1, limit=1))

    assert [entry.id for entry in entries] == ["C"]


def test_get_entries_invalid_json(cli_output: Any) -> None:
    cli_output("not json")

    with pytest.raises(ExecutionError, match="Failed to get entries: Invalid JSON"):
        _client().get_entries(GetEntriesParams())


def test_update_entry_date_is_call_time(mock_popen: Any) -> None:
    entry = _client().update_entry(UpdateEntryParams(entry_id="E1", starred=False))

    assert entry.id == "E1"
    assert entry.text == ""
    assert entry.date == NOW
    assert entry.starred is False
    assert mock_popen.call_args[0][0] == [CLI, "edit", "E1", "--unstarred"]


def test_check_availability(mock_popen: Any) -> None:
    assert _client().check_availability() is True
    mock_popen.return_value.communicate.assert_called_once_with(input=None, timeout=10)


def test_check_availability_never_raises(mock_popen: Any) -> None:
    mock_popen.side_effect = FileNotFoundError

    assert _client().check_availability() is False


def test_perform_returns_wire_shapes(cli_output: Any) -> None:
    cli_output("NEW")

    result = _client().perform(Action.CREATE_ENTRY, {"text": "hi", "all_day": True})

    assert result == {"id": "NEW", "text": "hi", "date": NOW, "allDay": True}


def test_perform_list_journals(mock_popen: Any) -> None:
    assert _client().perform(Action.LIST_JOURNALS, {}) == [
        {"id": "default", "name": "Journal", "mcpAccessAllowed": True}
    ]


def test_perform_validates_before_running(mock_popen: Any) -> None:
    with pytest.raises(ValidationError):
        _client().perform(Action.UPDATE_ENTRY, {})

    mock_popen.assert_not_called()


def test_check_availability_does_not_wait_for_running_write(mock_popen: Any) -> None:
    client = _client()
    writing = threading.Event()
    release = threading.Event()

    def slow_write() -> None:
        with client.runner._lock:
            writing.set()
            release.wait(5)

    writer = threading.Thread(target=slow_write)
    writer.start()
    writing.wait(5)
    results: list[bool] = []
    probe = threading.Thread(target=lambda: results.append(client.check_availability()))
    try:
        probe.start()
        probe.join(timeout=2)
        assert not probe.is_alive()
        assert results == [True]
    finally:
        release.set()
        writer.join()
        probe.join()


def test_writes_still_take_the_lock(mock_popen: Any) -> None:
    client = _client()
    client.runner._lock.acquire()
    writer = threading.Thread(target=client.list_journals)
    try:
        writer.start()
        writer.join(timeout=0.2)
        assert writer.is_alive()
        mock_popen.assert_not_called()
    finally:
        client.runner._lock.release()
        writer.join()
    mock_popen.assert_called_once()
