"""SQLAlchemy declarative base for all ORM models."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all database models."""


class SaveModel(Base):
    """ORM model for a saved game-state snapshot.

    The snapshot is stored as an opaque JSON document; its layout belongs to
    the service that writes it, not to the engine.
    """

    __tablename__ = "saves"

    save_id: Mapped[str] = mapped_column(String, primary_key=True)
    snapshot: Mapped[dict] = mapped_column(JSON, nullable=False)
    revision: Mapped[int] = mapped_column(Integer, default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
