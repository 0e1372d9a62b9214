"""Entrant roster stored in the database."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy import DateTime, Integer, String, UniqueConstraint, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from .base import Base


class Participant(Base):
    """A single entrant eligible for a grand draw."""

    __tablename__ = "participants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    """Primary key; also fixes the participant's position in the roster."""

    identifier: Mapped[str] = mapped_column(String(255), nullable=False)
    """External identifier returned to callers when the participant wins."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    """Timestamp when the participant was registered."""

    __table_args__ = (
        UniqueConstraint("identifier", name="participants_identifier_key"),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<Participant(id={self.id}, identifier={self.identifier})>"

    @classmethod
    def add_many(cls, session: Session, identifiers: Iterable[str]) -> list["Participant"]:
        """Register ``identifiers`` that are not yet on the roster.

        Blank and already-registered identifiers are skipped; the new rows
        are flushed and returned in input order.
        """
        existing = set(session.scalars(select(cls.identifier)).all())
        created: list[Participant] = []
        for raw in identifiers:
            identifier = raw.strip()
            if not identifier or identifier in existing:
                continue
            existing.add(identifier)
            participant = cls(identifier=identifier)
            session.add(participant)
            created.append(participant)
        session.flush()
        return created
