"""SQLAlchemy model for radio-transmission observations."""

from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, Column, DateTime, ForeignKey, Integer
from sqlalchemy import Interval, String
from sqlalchemy.orm import relationship

from .base import Base


class SrcList(Base):
    """Immutable child row keyed by its content hash.

    ``src`` points at ``sources.src`` logically; the reference is not enforced.
    """

    __tablename__ = "srclist"

    hashed = Column(BigInteger, primary_key=True, autoincrement=False)
    call_id = Column(
        String,
        ForeignKey("calls.filename"),
        nullable=False,
        index=True,
    )
    src = Column(Integer, nullable=False, index=True)
    time = Column(DateTime(timezone=True), nullable=False)
    pos = Column(Interval, nullable=False)
    emergency = Column(Boolean, nullable=False)
    signal_system = Column(String, nullable=True)

    call = relationship("Call", back_populates="src_list", lazy="raise")


__all__ = ["SrcList"]
