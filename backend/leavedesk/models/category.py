"""Leave categories (vacation, sick leave, ...)."""
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

DESCRIPTION_MAX_LENGTH = 200


class Category(Base):
    """Classification a request is filed under. The id is chosen by the manager."""

    __tablename__ = "categorie"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    descrizione: Mapped[str] = mapped_column(String(DESCRIPTION_MAX_LENGTH))
