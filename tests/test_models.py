"""Tests for parameter normalization and wire shapes."""

import pytest

from dayone_mcp.errors import ValidationError
from dayone_mcp.models import (
    Action,
    BridgeRequest,
    BridgeResponse,
    CreateEntryParams,
    Entry,
    GetEntriesParams,
    Journal,
    UpdateEntryParams,
    clamp_limit,
    join_list,
    split_list,
)


class TestSplitList:
    def test_none_and_empty_mean_absent(self):
        assert split_list(None) is None
        assert split_list("") is None

    def test_trims_and_keeps_order(self):
        assert split_list(" b , a,c ") == ["b", "a", "c"]

    def test_keeps_duplicates_and_empty_elements(self):
        assert split_list("a,,a") == ["a", "", "a"]

    def test_accepts_list(self):
        assert split_list([" x", "y "]) == ["x", "y"]

    def test_rejects_other_types(self):
        with pytest.raises(ValidationError):
            split_list(42)

    def test_join_list(self):
        assert join_list(["a", "b"]) == "a,b"
        assert join_list(None) is None


class TestClampLimit:
    @pytest.mark.parametrize(
        "limit, expected",
        [(None, 10), (0, 0), (5, 5), (50, 50), (1000, 50), (-3, 0)],
    )
    def test_clamp(self, limit, expected):
        assert clamp_limit(limit) == expected


class TestAction:
    def test_parse_known(self):
        assert Action.parse("create_entry") is Action.CREATE_ENTRY

    def test_parse_unknown(self):
        with pytest.raises(ValidationError, match="Unknown action: delete_entry"):
            Action.parse("delete_entry")


class TestCreateEntryParams:
    def test_text_required(self):
        with pytest.raises(ValidationError, match="Missing required parameter: text"):
            CreateEntryParams.from_dict({})

    def test_empty_text_is_missing(self):
        with pytest.raises(ValidationError, match="text"):
            CreateEntryParams.from_dict({"text": ""})

    def test_wrong_flag_type(self):
        with pytest.raises(ValidationError, match="starred must be a boolean"):
            CreateEntryParams.from_dict({"text": "x", "starred": "yes"})

    def test_full(self):
        params = CreateEntryParams.from_dict(
            {
                "text": "Hi",
                "journal_id": "J",
                "date": "2025-08-20T15:30:00Z",
                "tags": "a,b",
                "starred": True,
            }
        )

        assert params.text == "Hi"
        assert params.journal_id == "J"
        assert params.tags == ["a", "b"]
        assert params.starred is True
        assert params.all_day is None


class TestGetEntriesParams:
    def test_defaults(self):
        params = GetEntriesParams.from_dict({})

        assert params.limit == 10
        assert params.offset == 0
        assert params.query is None

    def test_limit_clamped(self):
        assert GetEntriesParams.from_dict({"limit": 1000}).limit == 50

    def test_negative_offset_floors_to_zero(self):
        assert GetEntriesParams.from_dict({"offset": -4}).offset == 0

    def test_float_limit_truncates(self):
        assert GetEntriesParams.from_dict({"limit": 7.9}).limit == 7

    def test_non_numeric_limit(self):
        with pytest.raises(ValidationError, match="limit must be a number"):
            GetEntriesParams.from_dict({"limit": "many"})

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_limit_rejected(self, value):
        with pytest.raises(ValidationError, match="limit must be a number"):
            GetEntriesParams.from_dict({"limit": value})

    def test_bool_limit_rejected(self):
        with pytest.raises(ValidationError):
            GetEntriesParams.from_dict({"limit": True})


class TestUpdateEntryParams:
    def test_entry_id_required(self):
        with pytest.raises(ValidationError, match="Missing required parameter: entry_id"):
            UpdateEntryParams.from_dict({"text": "x"})

    def test_entry_id_cannot_look_like_a_flag(self):
        with pytest.raises(ValidationError, match="cannot start with '-'"):
            UpdateEntryParams.from_dict({"entry_id": "--help"})

    def test_starred_tri_state(self):
        assert UpdateEntryParams.from_dict({"entry_id": "E"}).starred is None
        assert UpdateEntryParams.from_dict({"entry_id": "E", "starred": False}).starred is False


class TestWireShapes:
    def test_journal(self):
        assert Journal("default", "Journal", True).to_dict() == {
            "id": "default",
            "name": "Journal",
            "mcpAccessAllowed": True,
        }

    def test_entry_omits_unset_fields(self):
        assert Entry(id="E", text="t", date=None).to_dict() == {
            "id": "E",
            "text": "t",
            "date": None,
        }

    def test_entry_camel_case(self):
        entry = Entry(
            id="E",
            text="t",
            date="2025-01-01T00:00:00Z",
            journal_id="J",
            tags=["a"],
            starred=False,
            all_day=True,
            attachments=["p"],
        )

        assert entry.to_dict() == {
            "id": "E",
            "text": "t",
            "date": "2025-01-01T00:00:00Z",
            "journalId": "J",
            "tags": ["a"],
            "starred": False,
            "allDay": True,
            "attachments": ["p"],
        }

    def test_bridge_request(self):
        request = BridgeRequest(Action.GET_ENTRIES, {"limit": 1})

        assert request.to_dict() == {"action": "get_entries", "params": {"limit": 1}}

    def test_bridge_response(self):
        assert BridgeResponse(True, data=[]).to_dict() == {"success": True, "data": []}
        assert BridgeResponse(False, error="boom").to_dict() == {
            "success": False,
            "error": "boom",
        }
