"""SQLAlchemy model for frequency-hop observations."""

from __future__ import annotations

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, Interval
from sqlalchemy import SmallInteger, String
from sqlalchemy.orm import relationship

from .base import Base


class FreqList(Base):
    """Immutable child row keyed by its content hash."""

    __tablename__ = "freqlist"

    hashed = Column(BigInteger, primary_key=True, autoincrement=False)
    call_id = Column(
        String,
        ForeignKey("calls.filename"),
        nullable=False,
        index=True,
    )
    freq = Column(Integer, nullable=False)
    time = Column(DateTime(timezone=True), nullable=False)
    pos = Column(Interval, nullable=False)
    len = Column(Interval, nullable=False)
    error_count = Column(SmallInteger, nullable=False)
    spike_count = Column(SmallInteger, nullable=False)

    call = relationship("Call", back_populates="freq_list", lazy="raise")


__all__ = ["FreqList"]
