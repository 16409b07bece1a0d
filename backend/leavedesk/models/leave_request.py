"""Leave request model and its lifecycle columns."""
from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow
from .category import Category
from .enums import RequestStatus, enum_values
from .user import User

MOTIVATION_MAX_LENGTH = 500


class LeaveRequest(Base):
    """A single time-off request owned by exactly one user."""

    __tablename__ = "richieste_permesso"

    __table_args__ = (
        CheckConstraint("data_fine >= data_inizio", name="date_range"),
        Index("ix_richieste_utente_stato", "utente_id", "stato"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    utente_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    categoria_id: Mapped[int] = mapped_column(
        ForeignKey("categorie.id", ondelete="RESTRICT"), index=True
    )
    data_inizio: Mapped[date] = mapped_column(Date)
    data_fine: Mapped[date] = mapped_column(Date)
    motivazione: Mapped[str | None] = mapped_column(String(MOTIVATION_MAX_LENGTH), nullable=True)
    stato: Mapped[RequestStatus] = mapped_column(
        Enum(
            RequestStatus,
            name="stato_richiesta",
            values_callable=enum_values,
            native_enum=False,
            length=20,
        ),
        default=RequestStatus.PENDING,
        index=True,
    )
    data_richiesta: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    utente_valutazione_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    data_valutazione: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    requester: Mapped[User] = relationship(foreign_keys=[utente_id], lazy="selectin")
    category: Mapped[Category] = relationship(lazy="selectin")
    evaluator: Mapped[User | None] = relationship(
        foreign_keys=[utente_valutazione_id], lazy="selectin"
    )

    @property
    def days(self) -> int:
        """Calendar days covered, both ends included."""

        return (self.data_fine - self.data_inizio).days + 1

    @property
    def requester_nome(self) -> str:
        return self.requester.nome

    @property
    def requester_cognome(self) -> str:
        return self.requester.cognome

    @property
    def requester_email(self) -> str:
        return self.requester.email

    @property
    def categoria_descrizione(self) -> str:
        return self.category.descrizione

    @property
    def evaluator_nome(self) -> str | None:
        return self.evaluator.nome if self.evaluator else None

    @property
    def evaluator_cognome(self) -> str | None:
        return self.evaluator.cognome if self.evaluator else None
