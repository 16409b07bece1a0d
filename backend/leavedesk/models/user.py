"""User model: the principals that file and evaluate requests."""
from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow
from .enums import Role, enum_values


class User(Base):
    """Registered employee or manager."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    nome: Mapped[str] = mapped_column(String(100))
    cognome: Mapped[str] = mapped_column(String(100), index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String)
    ruolo: Mapped[Role] = mapped_column(
        Enum(Role, name="ruolo", values_callable=enum_values, native_enum=False, length=20),
        default=Role.EMPLOYEE,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
