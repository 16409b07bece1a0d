"""Leave request and statistics endpoints."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import get_current_principal, get_db_session
from ..models import LeaveRequest, RequestStatus
from ..permissions import Principal
from ..schemas import (
    Evaluation,
    LeaveRequestCreate,
    LeaveRequestList,
    LeaveRequestRead,
    LeaveRequestUpdate,
    Message,
    StatisticsList,
)
from ..services import requests as request_service
from ..services.statistics import request_statistics

router = APIRouter(prefix="/permessi", tags=["requests"])


@router.get("", response_model=LeaveRequestList)
async def list_requests(
    utente_id: int | None = Query(default=None, alias="utenteId"),
    stato: RequestStatus | None = Query(default=None),
    categoria_id: int | None = Query(default=None, alias="categoriaId"),
    current_user: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    """List requests; employees only ever see their own."""

    filters = request_service.RequestFilter(
        utente_id=utente_id, stato=stato, categoria_id=categoria_id
    )
    return {"data": await request_service.list_requests(session, current_user, filters)}


@router.post("", response_model=LeaveRequestRead, status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: LeaveRequestCreate,
    current_user: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db_session),
) -> LeaveRequest:
    """File a new request; it starts out pending."""

    return await request_service.create_request(
        session,
        current_user,
        categoria_id=payload.categoria_id,
        data_inizio=payload.data_inizio,
        data_fine=payload.data_fine,
        motivazione=payload.motivazione,
        utente_id=payload.utente_id,
    )


# Declared before "/{request_id}" so the literal path wins
@router.get("/statistiche", response_model=StatisticsList)
async def statistics(
    utente_id: int | None = Query(default=None, alias="utenteId"),
    mese: int | None = Query(default=None),
    anno: int | None = Query(default=None),
    current_user: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    """Per-employee, per-month totals over approved requests (managers only)."""

    rows = await request_statistics(
        session, current_user, utente_id=utente_id, mese=mese, anno=anno
    )
    return {"data": rows}


@router.get("/{request_id}", response_model=LeaveRequestRead)
async def get_request(
    request_id: int,
    current_user: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db_session),
) -> LeaveRequest:
    return await request_service.get_request(session, current_user, request_id)


@router.put("/{request_id}", response_model=LeaveRequestRead)
async def update_request(
    request_id: int,
    payload: LeaveRequestUpdate,
    current_user: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db_session),
) -> LeaveRequest:
    """Edit a pending request."""

    return await request_service.update_request(
        session,
        current_user,
        request_id,
        data_inizio=payload.data_inizio,
        data_fine=payload.data_fine,
        categoria_id=payload.categoria_id,
        motivazione=payload.motivazione,
    )


@router.put("/{request_id}/valuta", response_model=LeaveRequestRead)
async def evaluate_request(
    request_id: int,
    payload: Evaluation,
    current_user: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db_session),
) -> LeaveRequest:
    """Approve or reject a pending request (managers only)."""

    return await request_service.evaluate_request(
        session, current_user, request_id, payload.stato, payload.utente_valutazione_id
    )


@router.delete("/{request_id}", response_model=Message)
async def delete_request(
    request_id: int,
    current_user: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Message:
    await request_service.delete_request(session, current_user, request_id)
    return Message(message=f"Request {request_id} deleted")
