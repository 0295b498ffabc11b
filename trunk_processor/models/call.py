"""SQLAlchemy model for ingested calls."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Boolean, Column, DateTime
from sqlalchemy import Enum as SqlEnum
from sqlalchemy import ForeignKey, Integer, SmallInteger, String
from sqlalchemy.orm import relationship

from .base import Base


class AudioType(str, Enum):
    """Enumeration of recorder audio types."""

    ANALOG = "analog"
    DIGITAL = "digital"
    DIGITAL_TDMA = "digital_tdma"


class Call(Base):
    """One ingested recording, keyed by its storage filename."""

    __tablename__ = "calls"

    filename = Column(String, primary_key=True)
    freq = Column(Integer, nullable=False)
    freq_error = Column(SmallInteger, nullable=False)
    signal = Column(SmallInteger, nullable=False)
    noise = Column(SmallInteger, nullable=False)
    source_num = Column(SmallInteger, nullable=False)
    recorder_num = Column(SmallInteger, nullable=False)
    tdma_slot = Column(SmallInteger, nullable=False)
    phase2_tdma = Column(SmallInteger, nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    stop_time = Column(DateTime(timezone=True), nullable=False)
    emergency = Column(Boolean, nullable=False)
    priority = Column(SmallInteger, nullable=False)
    mode = Column(SmallInteger, nullable=False)
    duplex = Column(SmallInteger, nullable=False)
    encrypted = Column(Boolean, nullable=False)
    call_length = Column(SmallInteger, nullable=False)
    talkgroup = Column(
        Integer,
        ForeignKey("talkgroups.talkgroup"),
        nullable=False,
        index=True,
    )
    audio_type = Column(
        SqlEnum(
            AudioType,
            name="audiotype",
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
    )
    short_name = Column(String, nullable=False)
    transcription = Column(String, nullable=True)

    talkgroup_ref = relationship("Talkgroup", lazy="raise")
    freq_list = relationship("FreqList", back_populates="call", lazy="raise")
    src_list = relationship("SrcList", back_populates="call", lazy="raise")


__all__ = ["AudioType", "Call"]
