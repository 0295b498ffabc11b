"""Tests for the talkgroup transcription filter."""

from __future__ import annotations

import pytest

from conftest import call_bytes
from trunk_processor.config import FilterConfig
from trunk_processor.pipelines.upload import decide_transcription, parse_metadata, should_transcribe


def test_negated_id_wins_over_group_match():
    assert should_transcribe(100, "Fire", ["!100"], ["Fire"]) is False


def test_bare_id_allows():
    assert should_transcribe(100, "Police", ["100"], []) is True


def test_negation_checked_before_bare_id():
    assert should_transcribe(100, "Fire", ["100", "!100"], []) is False


def test_group_allows_when_id_not_listed():
    assert should_transcribe(200, "Fire", ["!100"], ["Fire"]) is True


def test_unmatched_talkgroup_is_denied():
    assert should_transcribe(300, "Public Works", ["100"], ["Fire"]) is False


@pytest.mark.parametrize("default", [True, False])
def test_disabled_filter_uses_default(default):
    meta = parse_metadata(call_bytes())
    config = FilterConfig(default_transcribe=default)

    assert config.enabled() is False
    assert decide_transcription(meta, config, archive=False) is default


def test_archive_marker_skips_filter():
    meta = parse_metadata(call_bytes())
    config = FilterConfig(tg_id=["100"], default_transcribe=True)

    assert decide_transcription(meta, config, archive=True) is False


def test_empty_list_still_enables_filtering():
    meta = parse_metadata(call_bytes())
    config = FilterConfig(tg_group=[], default_transcribe=True)

    assert config.enabled() is True
    assert decide_transcription(meta, config, archive=False) is False


def test_filter_lists_from_environment(monkeypatch):
    monkeypatch.setenv("FILTER_TG_ID", "!100, 200")
    monkeypatch.setenv("FILTER_TG_GROUP", '["Fire", "EMS"]')

    config = FilterConfig()

    assert config.ids() == ["!100", "200"]
    assert config.groups() == ["Fire", "EMS"]
