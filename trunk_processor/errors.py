"""Typed failures raised by the upload pipeline.

Every stage raises a subclass of :class:`ProcessorError`. The FastAPI
exception handler in ``trunk_processor.main`` turns them into plain-text
responses whose body starts with the error kind, e.g.
``MissingField: Missing required field or filename: audio``.
"""

from __future__ import annotations

from fastapi import status


class ProcessorError(Exception):
    """Base class for every failure surfaced as an HTTP response."""

    kind = "Processor"
    prefix = "Processing error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.prefix}: {self.message}"

    @property
    def detail(self) -> str:
        """Response body naming the error kind."""

        return f"{self.kind}: {self}"


class MissingFieldError(ProcessorError):
    kind = "MissingField"
    prefix = "Missing required field or filename"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidMultipartError(ProcessorError):
    kind = "InvalidMultipart"
    prefix = "Multipart processing error"
    status_code = status.HTTP_400_BAD_REQUEST


class FileTooLargeError(ProcessorError):
    kind = "FileTooLarge"
    prefix = "File too large"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, size: int, max_size: int) -> None:
        self.size = size
        self.max_size = max_size
        super().__init__(f"{size} bytes (max: {max_size} bytes)")


class InvalidFileTypeError(ProcessorError):
    kind = "InvalidFileType"
    prefix = "Invalid file type"
    status_code = status.HTTP_400_BAD_REQUEST


class ConfigurationError(ProcessorError):
    kind = "Configuration"
    prefix = "Configuration error"


class DatabaseError(ProcessorError):
    kind = "Database"
    prefix = "Database error"


class ObjectStorageUploadError(ProcessorError):
    kind = "ObjectStorageUpload"
    prefix = "S3 Upload Error"


class PathParseError(ProcessorError):
    kind = "PathParse"
    prefix = "Invalid object path"


class JsonParsingError(ProcessorError):
    kind = "JsonParsing"
    prefix = "Json Parsing Error"


class ExternalServiceCallError(ProcessorError):
    kind = "ExternalServiceCall"
    prefix = "External service call error"

    def __init__(self, service: str, message: str) -> None:
        self.service = service
        super().__init__(f"{service}: {message}")


class ServerInitError(ProcessorError):
    kind = "ServerInit"
    prefix = "Server Initialization Error"


__all__ = [
    "ProcessorError",
    "MissingFieldError",
    "InvalidMultipartError",
    "FileTooLargeError",
    "InvalidFileTypeError",
    "ConfigurationError",
    "DatabaseError",
    "ObjectStorageUploadError",
    "PathParseError",
    "JsonParsingError",
    "ExternalServiceCallError",
    "ServerInitError",
]
