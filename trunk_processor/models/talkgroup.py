"""SQLAlchemy model for talkgroups."""

from __future__ import annotations

from sqlalchemy import Column, Integer, String

from .base import Base


class Talkgroup(Base):
    """Named channel calls belong to. Global reference data, last write wins."""

    __tablename__ = "talkgroups"

    talkgroup = Column(Integer, primary_key=True, autoincrement=False)
    talkgroup_tag = Column(String, nullable=False)
    talkgroup_description = Column(String, nullable=False)
    talkgroup_group_tag = Column(String, nullable=False)
    talkgroup_group = Column(String, nullable=False)


__all__ = ["Talkgroup"]
