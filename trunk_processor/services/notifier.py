"""Webhook notifications for transcribed calls."""

from __future__ import annotations

import logging

import httpx

from trunk_processor.config import WebhookConfig
from trunk_processor.errors import ConfigurationError, ExternalServiceCallError
from trunk_processor.utils import format_timestamp
from trunk_processor.views import CallMetadata, EmbedFieldType, Webhook, WebhookEmbed

logger = logging.getLogger(__name__)

EMBED_COLOR = "12110930"


def build_webhook(
    meta: CallMetadata,
    transcription: str,
    *,
    username: str,
    avatar_url: str,
) -> Webhook:
    """Render the notification payload for one call."""

    timestamp = format_timestamp(meta.start_time)
    fields = [
        EmbedFieldType.TIMESTAMP.field(timestamp),
        EmbedFieldType.RADIO_IDS.field(", ".join(str(src) for src in meta.radio_ids())),
        EmbedFieldType.TRANSCRIPTION.field(transcription),
    ]
    embed = WebhookEmbed(
        color=EMBED_COLOR,
        timestamp=timestamp,
        title=f"{meta.talkgroup_group} - {meta.talkgroup_description}",
        fields=fields,
    )
    return Webhook(username=username, avatar_url=avatar_url, embeds=[embed])


class WebhookNotifier:
    """Post the payload plus the audio file to the configured webhook."""

    def __init__(self, http_client: httpx.AsyncClient, config: WebhookConfig) -> None:
        self._http = http_client
        self._config = config

    def build(self, meta: CallMetadata, transcription: str) -> Webhook:
        return build_webhook(
            meta,
            transcription,
            username=self._config.username,
            avatar_url=self._config.avatar_url,
        )

    async def notify(
        self,
        meta: CallMetadata,
        transcription: str,
        audio_name: str,
        audio_bytes: bytes,
    ) -> None:
        if not self._config.url:
            raise ConfigurationError("DISCORD_WEBHOOK is not configured")

        payload = self.build(meta, transcription).model_dump_json()
        try:
            response = await self._http.post(
                self._config.url,
                data={"payload_json": payload},
                files={"file1": (audio_name, audio_bytes)},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ExternalServiceCallError(
                "webhook",
                f"endpoint returned {exc.response.status_code}",
            ) from exc
        except httpx.HTTPError as exc:
            raise ExternalServiceCallError("webhook", str(exc) or repr(exc)) from exc

        logger.info("Webhook delivered call=%s status=%d", meta.filename, response.status_code)


__all__ = ["EMBED_COLOR", "WebhookNotifier", "build_webhook"]
