"""Tests for call document normalization and observation hashing."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from conftest import call_bytes, make_call
from trunk_processor.errors import JsonParsingError
from trunk_processor.models import AudioType
from trunk_processor.pipelines.upload import parse_metadata
from trunk_processor.utils import content_hash
from trunk_processor.views import FreqEntry, SrcEntry
from trunk_processor.views.metadata import HashedEntry, nanos_to_timedelta, seconds_to_nanos


def test_parse_metadata_normalizes_values():
    meta = parse_metadata(call_bytes())

    assert meta.start_time == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
    assert meta.emergency is False
    assert meta.encrypted is False
    assert meta.audio_type is AudioType.DIGITAL
    assert len(meta.freq_list) == 2
    assert meta.freq_list[1].pos == 5_250_000_000
    assert meta.freq_list[1].len == 6_750_000_000
    assert meta.src_list[0].tag == "Engine 1"
    assert meta.src_list[1].tag is None
    assert meta.src_list[0].signal_system is None


def test_parse_metadata_accepts_spaced_audio_type():
    meta = parse_metadata(call_bytes(audio_type="digital tdma"))

    assert meta.audio_type is AudioType.DIGITAL_TDMA


@pytest.mark.parametrize("flag", [2, -1, "1", True, False])
def test_flags_outside_zero_one_are_rejected(flag):
    with pytest.raises(JsonParsingError) as excinfo:
        parse_metadata(call_bytes(emergency=flag))

    assert "emergency" in str(excinfo.value)


def test_fractional_epoch_is_a_parse_failure():
    with pytest.raises(JsonParsingError) as excinfo:
        parse_metadata(call_bytes(start_time=1700000000.5))

    assert "start_time" in str(excinfo.value)


def test_whole_float_epoch_is_accepted():
    meta = parse_metadata(call_bytes(start_time=1700000000.0))

    assert meta.start_time == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


def test_missing_nested_list_is_a_parse_failure():
    document = make_call()
    del document["srcList"]

    with pytest.raises(JsonParsingError):
        parse_metadata(json.dumps(document).encode())


def test_malformed_json_is_a_parse_failure():
    with pytest.raises(JsonParsingError) as excinfo:
        parse_metadata(b"{not json")

    assert excinfo.value.detail.startswith("JsonParsing: Json Parsing Error")


def test_seconds_are_truncated_to_whole_nanoseconds():
    assert seconds_to_nanos(1.5) == 1_500_000_000
    assert seconds_to_nanos(0.0000000019) == 1
    assert seconds_to_nanos(-0.0000000019) == -1
    assert nanos_to_timedelta(1_500_000_999) == timedelta(seconds=1, microseconds=500_000)


def test_entry_hash_is_recomputed_with_owner():
    meta = parse_metadata(call_bytes())
    entry = meta.freq_list[0]
    ownerless = entry.hashed

    meta.assign_storage_key("p25/2023/11/14/a.m4a")

    assert entry.call_id == "p25/2023/11/14/a.m4a"
    assert entry.hashed != ownerless
    assert entry.hashed == content_hash(entry.hash_values())


def test_identical_documents_hash_identically():
    first = parse_metadata(call_bytes())
    second = parse_metadata(call_bytes())
    for meta in (first, second):
        meta.assign_storage_key("p25/2023/11/14/a.m4a")

    assert [entry.hashed for entry in first.entries()] == [
        entry.hashed for entry in second.entries()
    ]


def test_source_tag_does_not_change_the_hash():
    base = dict(src=1, time=1700000000, pos=0.0, emergency=0, signal_system=None)
    tagged = SrcEntry(**base, tag="Engine 1")
    untagged = SrcEntry(**base)

    assert tagged.hashed == untagged.hashed


def test_any_hashed_field_changes_the_hash():
    base = dict(freq=851012500, time=1700000000, pos=0.0, len=1.0, error_count=0, spike_count=0)
    reference = FreqEntry(**base).hashed

    for field, value in [
        ("freq", 851012501),
        ("time", 1700000001),
        ("pos", 0.5),
        ("len", 1.5),
        ("error_count", 1),
        ("spike_count", 1),
    ]:
        assert FreqEntry(**{**base, field: value}).hashed != reference, field


def test_sources_keep_last_tag_per_radio():
    document = make_call()
    document["srcList"].append({**document["srcList"][0], "time": 1700000009, "tag": "Engine 1 (new)"})
    meta = parse_metadata(json.dumps(document).encode())

    assert meta.sources() == {1234567: "Engine 1 (new)", 7654321: None}
    assert meta.radio_ids() == [1234567, 7654321, 1234567]


def test_call_row_requires_storage_key():
    meta = parse_metadata(call_bytes())

    with pytest.raises(ValueError):
        meta.call_row()


def test_base_observation_cannot_be_instantiated():
    with pytest.raises(TypeError):
        HashedEntry()
