"""Tests for error kinds, messages and status codes."""

from __future__ import annotations

import pytest

from trunk_processor.errors import (
    ConfigurationError,
    DatabaseError,
    ExternalServiceCallError,
    FileTooLargeError,
    InvalidFileTypeError,
    InvalidMultipartError,
    JsonParsingError,
    MissingFieldError,
    ObjectStorageUploadError,
    PathParseError,
    ProcessorError,
    ServerInitError,
)


@pytest.mark.parametrize(
    "error",
    [
        MissingFieldError("audio"),
        InvalidMultipartError("bad boundary"),
        FileTooLargeError(10, 5),
        InvalidFileTypeError("nope"),
    ],
)
def test_caller_errors_are_bad_requests(error):
    assert error.status_code == 400


@pytest.mark.parametrize(
    "error",
    [
        ConfigurationError("x"),
        DatabaseError("x"),
        ObjectStorageUploadError("x"),
        PathParseError("x"),
        JsonParsingError("x"),
        ExternalServiceCallError("webhook", "x"),
        ServerInitError("x"),
    ],
)
def test_downstream_errors_are_server_errors(error):
    assert isinstance(error, ProcessorError)
    assert error.status_code == 500


def test_detail_names_the_kind():
    error = MissingFieldError("audio")

    assert str(error) == "Missing required field or filename: audio"
    assert error.detail == "MissingField: Missing required field or filename: audio"


def test_external_service_error_names_the_service():
    error = ExternalServiceCallError("transcription", "endpoint returned 503")

    assert error.service == "transcription"
    assert error.detail == (
        "ExternalServiceCall: External service call error: transcription: endpoint returned 503"
    )
