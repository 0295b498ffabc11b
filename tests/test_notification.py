"""Tests for webhook payload rendering and delivery."""

from __future__ import annotations

import json

import pytest

from conftest import WEBHOOK_URL, call_bytes
from trunk_processor.config import WebhookConfig
from trunk_processor.errors import ExternalServiceCallError
from trunk_processor.pipelines.upload import parse_metadata
from trunk_processor.services import WebhookNotifier, build_webhook


def test_payload_layout():
    meta = parse_metadata(call_bytes())

    webhook = build_webhook(meta, "units respond", username="Trunk Recorder", avatar_url="http://a/img.png")
    payload = json.loads(webhook.model_dump_json())

    assert payload["username"] == "Trunk Recorder"
    assert payload["avatar_url"] == "http://a/img.png"
    (embed,) = payload["embeds"]
    assert embed["color"] == "12110930"
    assert embed["title"] == "Fire - Fire Dispatch Main"
    assert embed["timestamp"] == "2023-11-14T22:13:20.000Z"
    assert embed["fields"] == [
        {"name": "Start timestamp:", "value": "2023-11-14T22:13:20.000Z"},
        {"name": "Radio IDs:", "value": "1234567, 7654321"},
        {"name": "Transcription:", "value": "units respond"},
    ]


@pytest.mark.asyncio
async def test_notify_posts_payload_and_audio(http_client, endpoints):
    meta = parse_metadata(call_bytes())
    notifier = WebhookNotifier(http_client, WebhookConfig(url=WEBHOOK_URL))

    await notifier.notify(meta, "units respond", "call.m4a", b"audio-bytes")

    (request,) = endpoints.to(WEBHOOK_URL)
    body = request.content
    assert b'name="payload_json"' in body
    assert b'"title":"Fire - Fire Dispatch Main"' in body
    assert b'name="file1"; filename="call.m4a"' in body
    assert b"audio-bytes" in body


@pytest.mark.asyncio
async def test_rejected_notification_fails(http_client, endpoints):
    endpoints.webhook_status = 400
    meta = parse_metadata(call_bytes())
    notifier = WebhookNotifier(http_client, WebhookConfig(url=WEBHOOK_URL))

    with pytest.raises(ExternalServiceCallError) as excinfo:
        await notifier.notify(meta, "units respond", "call.m4a", b"audio")

    assert excinfo.value.service == "webhook"
