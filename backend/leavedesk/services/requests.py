"""Leave request lifecycle: filing, listing, editing, evaluation and deletion.

State machine::

    In attesa --approve--> Approvato
    In attesa --reject---> Rifiutato
    In attesa --withdraw-> (deleted)

Approved and rejected requests are terminal for the requester; a manager may
still delete them. Every transition away from "In attesa" is a compare-and-set
on the status column, so two concurrent evaluations cannot both succeed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..models import Category, LeaveRequest, RequestStatus, User
from ..models.base import utcnow
from ..models.leave_request import MOTIVATION_MAX_LENGTH
from ..permissions import Action, Principal, authorize, require

logger = logging.getLogger(__name__)

TERMINAL_DECISIONS = (RequestStatus.APPROVED, RequestStatus.REJECTED)


@dataclass(frozen=True)
class RequestFilter:
    """Optional listing constraints. Employees are always pinned to themselves."""

    utente_id: int | None = None
    stato: RequestStatus | None = None
    categoria_id: int | None = None


def _deny(principal: Principal, message: str) -> None:
    logger.warning("Denied request operation for user %s: %s", principal.id, message)
    raise AuthorizationError(message)


def _validate_dates(data_inizio: date | None, data_fine: date | None) -> None:
    if data_inizio is None or data_fine is None:
        raise ValidationError("Start and end dates are required")
    if data_fine < data_inizio:
        raise ValidationError("End date must not be before start date")


def _clean_motivation(motivazione: str | None) -> str | None:
    text = (motivazione or "").strip()
    if len(text) > MOTIVATION_MAX_LENGTH:
        raise ValidationError(f"Motivation must be at most {MOTIVATION_MAX_LENGTH} characters")
    return text or None


async def _ensure_category(session: AsyncSession, categoria_id: int | None) -> None:
    if categoria_id is None or await session.get(Category, categoria_id) is None:
        raise ValidationError(f"Category {categoria_id} does not exist")


async def _load(session: AsyncSession, request_id: int) -> LeaveRequest:
    """Fetch a request with fresh column values and relationships."""

    result = await session.execute(
        select(LeaveRequest)
        .where(LeaveRequest.id == request_id)
        .execution_options(populate_existing=True)
    )
    leave_request = result.scalar_one_or_none()
    if leave_request is None:
        raise NotFoundError(f"Request {request_id} not found")
    return leave_request


async def get_request(session: AsyncSession, principal: Principal, request_id: int) -> LeaveRequest:
    leave_request = await _load(session, request_id)
    if not (
        authorize(principal, Action.VIEW_ALL_REQUESTS)
        or authorize(principal, Action.VIEW_OWN_REQUESTS, leave_request)
    ):
        _deny(principal, "You can only view your own requests")
    return leave_request


async def create_request(
    session: AsyncSession,
    principal: Principal,
    *,
    categoria_id: int,
    data_inizio: date,
    data_fine: date,
    motivazione: str | None = None,
    utente_id: int | None = None,
) -> LeaveRequest:
    """File a new pending request for ``utente_id`` (defaults to the caller)."""

    requester_id = principal.id if utente_id is None else utente_id
    if requester_id != principal.id:
        require(
            principal,
            Action.CREATE_REQUEST_FOR_OTHERS,
            message="You can only file requests for yourself",
        )
        if await session.get(User, requester_id) is None:
            raise ValidationError(f"User {requester_id} does not exist")
    else:
        require(principal, Action.CREATE_OWN_REQUEST)

    _validate_dates(data_inizio, data_fine)
    text = _clean_motivation(motivazione)
    await _ensure_category(session, categoria_id)

    leave_request = LeaveRequest(
        utente_id=requester_id,
        categoria_id=categoria_id,
        data_inizio=data_inizio,
        data_fine=data_fine,
        motivazione=text,
        stato=RequestStatus.PENDING,
        data_richiesta=utcnow(),
    )
    session.add(leave_request)
    try:
        await session.commit()
    except IntegrityError as exc:
        # Category removed between the existence check and the insert
        await session.rollback()
        raise ValidationError(f"Category {categoria_id} does not exist") from exc

    logger.info(
        "User %s filed request %s for user %s", principal.id, leave_request.id, requester_id
    )
    return await _load(session, leave_request.id)


async def list_requests(
    session: AsyncSession, principal: Principal, filters: RequestFilter | None = None
) -> Sequence[LeaveRequest]:
    """Requests visible to ``principal`` in filing order."""

    filters = filters or RequestFilter()
    stmt = select(LeaveRequest)

    if authorize(principal, Action.VIEW_ALL_REQUESTS):
        if filters.utente_id is not None:
            stmt = stmt.where(LeaveRequest.utente_id == filters.utente_id)
    else:
        require(principal, Action.VIEW_OWN_REQUESTS)
        stmt = stmt.where(LeaveRequest.utente_id == principal.id)

    if filters.stato is not None:
        stmt = stmt.where(LeaveRequest.stato == filters.stato)
    if filters.categoria_id is not None:
        stmt = stmt.where(LeaveRequest.categoria_id == filters.categoria_id)

    result = await session.execute(stmt.order_by(LeaveRequest.id))
    return list(result.scalars().all())


async def evaluate_request(
    session: AsyncSession,
    principal: Principal,
    request_id: int,
    decision: RequestStatus,
    evaluator_id: int | None = None,
) -> LeaveRequest:
    """Approve or reject a pending request.

    The evaluator recorded is always ``principal``; an ``evaluator_id`` naming
    anybody else is refused rather than trusted.
    """

    require(principal, Action.EVALUATE_REQUEST, message="Only managers can evaluate requests")
    if evaluator_id is not None and evaluator_id != principal.id:
        _deny(principal, "Evaluator must be the authenticated user")
    if decision not in TERMINAL_DECISIONS:
        raise ValidationError("Decision must be Approvato or Rifiutato")

    leave_request = await _load(session, request_id)
    if leave_request.stato is not RequestStatus.PENDING:
        raise ConflictError(f"Request {request_id} has already been evaluated")
    if leave_request.utente_id == principal.id and not get_settings().allow_self_evaluation:
        _deny(principal, "Managers cannot evaluate their own requests")

    result = await session.execute(
        update(LeaveRequest)
        .where(LeaveRequest.id == request_id, LeaveRequest.stato == RequestStatus.PENDING)
        .values(
            stato=decision,
            utente_valutazione_id=principal.id,
            data_valutazione=utcnow(),
        )
    )
    if result.rowcount != 1:
        await session.rollback()
        raise ConflictError(f"Request {request_id} has already been evaluated")
    await session.commit()

    logger.info("User %s set request %s to %s", principal.id, request_id, decision.value)
    return await _load(session, request_id)


async def update_request(
    session: AsyncSession,
    principal: Principal,
    request_id: int,
    *,
    data_inizio: date | None = None,
    data_fine: date | None = None,
    categoria_id: int | None = None,
    motivazione: str | None = None,
) -> LeaveRequest:
    """Edit dates, category or motivation of a pending request.

    Omitted fields keep their value. The merged result is validated before
    anything is written.
    """

    leave_request = await _load(session, request_id)
    if authorize(principal, Action.EDIT_ANY_PENDING_REQUEST):
        if leave_request.stato is not RequestStatus.PENDING:
            raise ConflictError(f"Request {request_id} has already been evaluated")
    else:
        require(
            principal,
            Action.EDIT_OWN_PENDING_REQUEST,
            leave_request,
            message="Only your own pending requests can be edited",
        )

    new_start = data_inizio or leave_request.data_inizio
    new_end = data_fine or leave_request.data_fine
    new_category = categoria_id if categoria_id is not None else leave_request.categoria_id
    new_motivation = (
        _clean_motivation(motivazione) if motivazione is not None else leave_request.motivazione
    )
    _validate_dates(new_start, new_end)
    if new_category != leave_request.categoria_id:
        await _ensure_category(session, new_category)

    try:
        result = await session.execute(
            update(LeaveRequest)
            .where(LeaveRequest.id == request_id, LeaveRequest.stato == RequestStatus.PENDING)
            .values(
                data_inizio=new_start,
                data_fine=new_end,
                categoria_id=new_category,
                motivazione=new_motivation,
            )
        )
    except IntegrityError as exc:
        await session.rollback()
        raise ValidationError(f"Category {new_category} does not exist") from exc
    if result.rowcount != 1:
        await session.rollback()
        raise ConflictError(f"Request {request_id} has already been evaluated")
    await session.commit()

    logger.info("User %s updated request %s", principal.id, request_id)
    return await _load(session, request_id)


async def delete_request(session: AsyncSession, principal: Principal, request_id: int) -> None:
    """Withdraw a pending request, or force-delete any request as a manager."""

    leave_request = await _load(session, request_id)
    stmt = delete(LeaveRequest).where(LeaveRequest.id == request_id)

    if not authorize(principal, Action.DELETE_ANY_REQUEST):
        require(
            principal,
            Action.DELETE_OWN_PENDING_REQUEST,
            leave_request,
            message="Only your own pending requests can be deleted",
        )
        stmt = stmt.where(
            LeaveRequest.utente_id == principal.id,
            LeaveRequest.stato == RequestStatus.PENDING,
        )

    result = await session.execute(stmt)
    if result.rowcount != 1:
        await session.rollback()
        if authorize(principal, Action.DELETE_ANY_REQUEST):
            raise NotFoundError(f"Request {request_id} not found")
        raise ConflictError(f"Request {request_id} has already been evaluated")
    await session.commit()

    logger.info("User %s deleted request %s", principal.id, request_id)
