"""SQLAlchemy models for the relational store."""

from .base import Base
from .call import AudioType, Call  # noqa: F401
from .freqlist import FreqList  # noqa: F401
from .source import Source  # noqa: F401
from .srclist import SrcList  # noqa: F401
from .talkgroup import Talkgroup  # noqa: F401

__all__ = [
    "Base",
    "AudioType",
    "Call",
    "FreqList",
    "Source",
    "SrcList",
    "Talkgroup",
]
