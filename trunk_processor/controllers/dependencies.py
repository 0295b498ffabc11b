"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from trunk_processor.config import Settings
from trunk_processor.pipelines.upload import UploadProcessor


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_processor(request: Request) -> UploadProcessor:
    """Return the upload processor built at application startup."""

    return request.app.state.processor


SettingsDep = Annotated[Settings, Depends(get_settings)]
ProcessorDep = Annotated[UploadProcessor, Depends(get_processor)]


__all__ = ["ProcessorDep", "SettingsDep", "get_processor", "get_settings"]
