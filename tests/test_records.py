"""
Tests for the NFT record model, merge rules and completion gate.
"""

from datetime import datetime, timezone
from itertools import product

import pytest

from mintbot.core.records import (
    REQUIRED_FIELDS,
    ExtractedFields,
    MintResult,
    NftRecord,
    cache_key,
    is_complete,
    merge,
    missing_fields,
    stored_record_adapter,
)

RECIPIENT = "0x20c6F9006d563240031A1388f4f25726029a6368"


class TestCacheKey:
    """Test the record store key format."""

    def test_key_format(self):
        assert cache_key("Mintbot", "user-1") == "Mintbot/user-1/data"

    def test_keys_differ_per_participant(self):
        assert cache_key("Mintbot", "user-1") != cache_key("Mintbot", "user-2")

    def test_keys_differ_per_agent(self):
        assert cache_key("AgentA", "user-1") != cache_key("AgentB", "user-1")


class TestCompletionGate:
    """Test is_complete() and missing_fields()."""

    def test_empty_record_is_incomplete(self):
        record = NftRecord()
        assert not is_complete(record)
        assert missing_fields(record) == ["name", "description", "recipient"]

    @pytest.mark.parametrize(
        "present",
        [p for p in product([False, True], repeat=3) if not all(p)],
    )
    def test_incomplete_unless_all_three_set(self, present):
        values = {field: "value" for field, keep in zip(REQUIRED_FIELDS, present) if keep}
        record = NftRecord(**values)
        assert not is_complete(record)
        assert missing_fields(record) == [
            field for field, keep in zip(REQUIRED_FIELDS, present) if not keep
        ]

    def test_complete_when_all_set(self):
        record = NftRecord(name="Car", description="A car", recipient=RECIPIENT)
        assert is_complete(record)
        assert missing_fields(record) == []

    def test_empty_string_counts_as_missing(self):
        record = NftRecord(name="Car", description="", recipient=RECIPIENT)
        assert not is_complete(record)
        assert missing_fields(record) == ["description"]


class TestMerge:
    """Test first-write-wins slot filling."""

    def test_name_into_empty_record(self):
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)
        merged, changed = merge(NftRecord(), {"name": "X"}, now=now)

        assert changed is True
        assert merged.name == "X"
        assert merged.description is None
        assert merged.recipient is None
        assert merged.last_updated == now

    def test_known_field_is_never_overwritten(self):
        cached = NftRecord(name="Original")
        merged, changed = merge(cached, {"name": "Replacement"})

        assert changed is False
        assert merged.name == "Original"

    def test_only_unset_fields_are_filled(self):
        cached = NftRecord(name="Original", recipient=RECIPIENT)
        merged, changed = merge(
            cached,
            {"name": "Other", "description": "Shiny", "recipient": "vitalik.eth"},
        )

        assert changed is True
        assert merged.name == "Original"
        assert merged.description == "Shiny"
        assert merged.recipient == RECIPIENT

    def test_blank_values_are_ignored(self):
        merged, changed = merge(NftRecord(), {"name": "   ", "description": ""})
        assert changed is False
        assert merged == NftRecord()

    def test_unchanged_record_keeps_timestamp(self):
        stamp = datetime(2025, 6, 1, tzinfo=timezone.utc)
        cached = NftRecord(name="A", last_updated=stamp)
        merged, changed = merge(cached, ExtractedFields())

        assert changed is False
        assert merged.last_updated == stamp

    def test_merge_does_not_mutate_cached_record(self):
        cached = NftRecord()
        merge(cached, {"name": "X"})
        assert cached.name is None

    def test_first_write_wins_over_many_extractions(self):
        record = NftRecord()
        for name in ["First", "Second", "Third"]:
            record, _ = merge(record, {"name": name})
        assert record.name == "First"

    def test_unknown_keys_are_ignored(self):
        merged, changed = merge(NftRecord(), {"name": "X", "price": "10 ETH"})
        assert changed is True
        assert merged.name == "X"


class TestExtractedFields:
    """Test normalisation of model output."""

    def test_strips_whitespace(self):
        fields = ExtractedFields.model_validate({"name": "  Car  "})
        assert fields.name == "Car"

    def test_non_string_values_are_stringified(self):
        fields = ExtractedFields.model_validate({"name": 42})
        assert fields.name == "42"

    def test_missing_values_are_none(self):
        fields = ExtractedFields.model_validate({})
        assert fields.name is None
        assert fields.description is None
        assert fields.recipient is None


class TestStoredRecordVariant:
    """Test the tagged union shared by NftRecord and MintResult."""

    def test_collecting_record_round_trips(self):
        record = NftRecord(name="Car")
        decoded = stored_record_adapter.validate_json(record.model_dump_json())
        assert isinstance(decoded, NftRecord)
        assert decoded.name == "Car"

    def test_minted_record_round_trips(self):
        result = MintResult(tx_hash="0xabc")
        decoded = stored_record_adapter.validate_json(result.model_dump_json())
        assert isinstance(decoded, MintResult)
        assert decoded.tx_hash == "0xabc"

    def test_state_tags(self):
        assert NftRecord().state == "collecting"
        assert MintResult().state == "minted"

    def test_has_tx_hash(self):
        assert MintResult(tx_hash="0xabc").has_tx_hash()
        assert not MintResult(tx_hash="  ").has_tx_hash()
        assert not MintResult().has_tx_hash()

    def test_known_fields_in_display_order(self):
        record = NftRecord(recipient=RECIPIENT, name="Car")
        assert list(record.known_fields()) == ["name", "recipient"]
