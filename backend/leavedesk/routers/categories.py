"""Category endpoints for the FastAPI backend."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import get_current_principal, get_db_session
from ..models import Category
from ..permissions import Principal
from ..schemas import CategoryCreate, CategoryList, CategoryRead, CategoryUpdate, Message
from ..services import categories as category_service

router = APIRouter(prefix="/categorie", tags=["categories"])


@router.get("", response_model=CategoryList)
async def list_categories(
    current_user: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    """Return every category; any authenticated user may read them."""

    return {"data": await category_service.list_categories(session)}


@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    current_user: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Category:
    """Create a category (managers only)."""

    return await category_service.create_category(
        session, current_user, payload.id, payload.descrizione
    )


@router.put("/{category_id}", response_model=CategoryRead)
async def update_category(
    category_id: int,
    payload: CategoryUpdate,
    current_user: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Category:
    """Change a category description (managers only)."""

    return await category_service.update_category(
        session, current_user, category_id, payload.descrizione
    )


@router.delete("/{category_id}", response_model=Message)
async def delete_category(
    category_id: int,
    current_user: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Message:
    """Delete an unused category (managers only)."""

    await category_service.delete_category(session, current_user, category_id)
    return Message(message=f"Category {category_id} deleted")
