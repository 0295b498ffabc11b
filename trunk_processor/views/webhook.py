"""Webhook notification payload schemas."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class EmbedField(BaseModel):
    name: str
    value: str


class EmbedFieldType(str, Enum):
    """Labels of the fields rendered into every notification embed."""

    TIMESTAMP = "Start timestamp:"
    RADIO_IDS = "Radio IDs:"
    TRANSCRIPTION = "Transcription:"

    def field(self, value: str) -> EmbedField:
        return EmbedField(name=self.value, value=value)


class WebhookEmbed(BaseModel):
    color: str
    timestamp: str
    title: str
    fields: list[EmbedField]


class Webhook(BaseModel):
    username: str
    avatar_url: str
    embeds: list[WebhookEmbed]


__all__ = ["EmbedField", "EmbedFieldType", "Webhook", "WebhookEmbed"]
