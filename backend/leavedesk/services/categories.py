"""Category registry: the manager-maintained list of leave categories."""
from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Category, LeaveRequest
from ..models.category import DESCRIPTION_MAX_LENGTH
from ..permissions import Action, Principal, require

logger = logging.getLogger(__name__)


def _clean_description(descrizione: str | None) -> str:
    text = (descrizione or "").strip()
    if not text:
        raise ValidationError("Description is required")
    if len(text) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters")
    return text


async def list_categories(session: AsyncSession) -> Sequence[Category]:
    result = await session.execute(select(Category).order_by(Category.id))
    return list(result.scalars().all())


async def get_category(session: AsyncSession, category_id: int) -> Category:
    category = await session.get(Category, category_id)
    if category is None:
        raise NotFoundError(f"Category {category_id} not found")
    return category


async def create_category(
    session: AsyncSession, principal: Principal, category_id: int, descrizione: str
) -> Category:
    """Register a new category under a caller-chosen identifier."""

    require(principal, Action.MANAGE_CATEGORIES, message="Only managers can manage categories")
    if category_id <= 0:
        raise ValidationError("Category id must be a positive integer")
    text = _clean_description(descrizione)

    if await session.get(Category, category_id) is not None:
        raise ConflictError(f"Category {category_id} already exists")

    category = Category(id=category_id, descrizione=text)
    session.add(category)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError(f"Category {category_id} already exists") from exc
    logger.info("User %s created category %s", principal.id, category_id)
    return category


async def update_category(
    session: AsyncSession, principal: Principal, category_id: int, descrizione: str
) -> Category:
    """Replace the description; the identifier never changes."""

    require(principal, Action.MANAGE_CATEGORIES, message="Only managers can manage categories")
    text = _clean_description(descrizione)
    category = await get_category(session, category_id)
    category.descrizione = text
    await session.commit()
    logger.info("User %s updated category %s", principal.id, category_id)
    return category


async def delete_category(session: AsyncSession, principal: Principal, category_id: int) -> None:
    """Remove a category that no request refers to.

    Categories in use are never deleted; the RESTRICT foreign key backs up the
    count below against a request filed concurrently.
    """

    require(principal, Action.MANAGE_CATEGORIES, message="Only managers can manage categories")
    category = await get_category(session, category_id)

    in_use = await session.scalar(
        select(func.count()).select_from(LeaveRequest).where(LeaveRequest.categoria_id == category_id)
    )
    if in_use:
        raise ConflictError(
            f"Category {category_id} is used by {in_use} request(s) and cannot be deleted"
        )

    await session.delete(category)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError(f"Category {category_id} is in use and cannot be deleted") from exc
    logger.info("User %s deleted category %s", principal.id, category_id)
