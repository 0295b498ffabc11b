"""Shared pytest fixtures for the upload service tests.

Provides a SQLite database, an in-memory S3 stand-in, a mock transport for
the transcription and webhook endpoints, and an ASGI client bound to an app
wired with all of them.
"""

from __future__ import annotations

import asyncio
import copy
import inspect
import json
from typing import Any, AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio
from botocore.exceptions import ClientError
from httpx import ASGITransport, AsyncClient

from trunk_processor.config import (
    DatabaseConfig,
    FilterConfig,
    S3Config,
    Settings,
    TranscriptionConfig,
    WebhookConfig,
)
from trunk_processor.database import create_database_engine, create_session_factory, init_models
from trunk_processor.main import create_app

TRANSCRIPTION_URL = "http://stt.test/v1/audio/transcriptions"
WEBHOOK_URL = "http://hooks.test/api/webhooks/1/token"
BUCKET = "calls"

SAMPLE_CALL: dict[str, Any] = {
    "freq": 851012500,
    "freq_error": 12,
    "signal": -60,
    "noise": -110,
    "source_num": 0,
    "recorder_num": 2,
    "tdma_slot": 0,
    "phase2_tdma": 0,
    "start_time": 1700000000,
    "stop_time": 1700000012,
    "emergency": 0,
    "priority": 4,
    "mode": 0,
    "duplex": 0,
    "encrypted": 0,
    "call_length": 12,
    "talkgroup": 100,
    "talkgroup_tag": "Fire Dispatch",
    "talkgroup_description": "Fire Dispatch Main",
    "talkgroup_group_tag": "Fire-Tac",
    "talkgroup_group": "Fire",
    "audio_type": "digital",
    "short_name": "county-p25",
    "freqList": [
        {
            "freq": 851012500,
            "time": 1700000000,
            "pos": 0.0,
            "len": 5.25,
            "error_count": 0,
            "spike_count": 1,
        },
        {
            "freq": 851012500,
            "time": 1700000006,
            "pos": 5.25,
            "len": 6.75,
            "error_count": 2,
            "spike_count": 0,
        },
    ],
    "srcList": [
        {
            "src": 1234567,
            "time": 1700000000,
            "pos": 0.0,
            "emergency": 0,
            "signal_system": "",
            "tag": "Engine 1",
        },
        {
            "src": 7654321,
            "time": 1700000006,
            "pos": 5.25,
            "emergency": 0,
            "signal_system": "",
            "tag": "",
        },
    ],
}

AUDIO_NAME = "100-1700000000_851012500-call_1.m4a"
JSON_NAME = "100-1700000000_851012500-call_1.json"
CALL_KEY = f"p25/2023/11/14/{AUDIO_NAME}"


def make_call(**overrides: Any) -> dict[str, Any]:
    """Return a deep copy of the sample call document with ``overrides`` applied."""

    document = copy.deepcopy(SAMPLE_CALL)
    document.update(overrides)
    return document


def call_bytes(**overrides: Any) -> bytes:
    return json.dumps(make_call(**overrides)).encode("utf-8")


class FakeS3Client:
    """Synchronous stand-in for a boto3 S3 client.

    ``failures`` maps an object key to the number of ``put_object`` calls that
    should raise ``ClientError`` before the key is accepted.
    """

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.calls: list[str] = []
        self.failures: dict[str, int] = {}

    def put_object(self, *, Bucket: str, Key: str, Body: bytes) -> dict[str, Any]:
        self.calls.append(Key)
        remaining = self.failures.get(Key, 0)
        if remaining:
            self.failures[Key] = remaining - 1
            raise ClientError(
                {"Error": {"Code": "SlowDown", "Message": "Please reduce your request rate."}},
                "PutObject",
            )
        self.objects[(Bucket, Key)] = Body
        return {"ETag": '"fake"'}

    def keys(self) -> set[str]:
        return {key for _, key in self.objects}


class EndpointRecorder:
    """Routes outbound requests to canned responses and keeps them for assertions."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.transcript = "engine one respond to main street"
        self.transcription_status = 200
        self.webhook_status = 204

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url == TRANSCRIPTION_URL:
            return httpx.Response(self.transcription_status, text=f"{self.transcript}\n")
        if url == WEBHOOK_URL:
            return httpx.Response(self.webhook_status)
        return httpx.Response(404)

    def to(self, url: str) -> list[httpx.Request]:
        return [request for request in self.requests if str(request.url) == url]


@pytest.fixture
def s3_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def endpoints() -> EndpointRecorder:
    return EndpointRecorder()


@pytest.fixture
def database_config(tmp_path) -> DatabaseConfig:
    return DatabaseConfig(url_override=f"sqlite+aiosqlite:///{tmp_path / 'calls.db'}")


@pytest.fixture
def make_settings(database_config: DatabaseConfig) -> Callable[..., Settings]:
    """Build settings pointing at the test doubles; keyword args replace sections."""

    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "database": database_config,
            "s3": S3Config(bucket_name=BUCKET),
            "transcription": TranscriptionConfig(endpoint=TRANSCRIPTION_URL),
            "webhook": WebhookConfig(url=WEBHOOK_URL),
            "filter": FilterConfig(default_transcribe=True),
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest_asyncio.fixture
async def engine(database_config: DatabaseConfig):
    """Create the test database with every table."""

    engine = create_database_engine(database_config)
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def http_client(endpoints: EndpointRecorder) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(endpoints.handler)) as client:
        yield client


@pytest.fixture
def build_client(engine, s3_client, http_client):
    """Return a factory producing an ASGI client for an app built from settings."""

    def _build(app_settings: Settings) -> AsyncClient:
        app = create_app(
            app_settings,
            s3_client=s3_client,
            http_client=http_client,
            engine=engine,
        )
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    return _build


@pytest_asyncio.fixture
async def client(build_client, settings) -> AsyncGenerator[AsyncClient, None]:
    """ASGI client for an app that transcribes every call by default."""

    async with build_client(settings) as ac:
        yield ac


def upload_files(
    document: bytes | None = None,
    *,
    json_name: str = JSON_NAME,
    audio_name: str = AUDIO_NAME,
    audio: bytes = b"\x00\x00\x00\x18ftypM4A fake audio",
) -> dict[str, tuple[str, bytes, str]]:
    """Multipart ``files`` mapping for ``POST /upload``."""

    return {
        "json": (json_name, document if document is not None else call_bytes(), "application/json"),
        "audio": (audio_name, audio, "audio/mp4"),
    }


async def eventually(predicate: Callable[[], Any], *, timeout: float = 2.0) -> bool:
    """Poll ``predicate`` until it is truthy; work left running after a failed join."""

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        result = predicate()
        if inspect.isawaitable(result):
            result = await result
        if result or loop.time() >= deadline:
            return bool(result)
        await asyncio.sleep(0.01)
