"""SQLAlchemy model for radio units."""

from __future__ import annotations

from sqlalchemy import Column, Integer, String

from .base import Base


class Source(Base):
    __tablename__ = "sources"

    src = Column(Integer, primary_key=True, autoincrement=False)
    tag = Column(String, nullable=True)


__all__ = ["Source"]
