"""Aggregate statistics over approved requests.

Requests are grouped by requester and by the month/year in which they were
approved; the month and year filters match that evaluation period, not the
filing date.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from sqlalchemy import extract, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ValidationError
from ..models import LeaveRequest, RequestStatus
from ..permissions import Action, Principal, require
from ..schemas import StatisticsRow


def aggregate(requests: Iterable[LeaveRequest]) -> list[StatisticsRow]:
    """Fold requests into one row per (requester, evaluation year, month).

    Days approved only counts requests whose status is Approved, whatever
    was fed in.
    """

    groups: dict[tuple[int, int, int], list[LeaveRequest]] = defaultdict(list)
    for leave_request in requests:
        evaluated = leave_request.data_valutazione
        if evaluated is None:
            continue
        groups[(leave_request.utente_id, evaluated.year, evaluated.month)].append(leave_request)

    rows = []
    for (utente_id, anno, mese), members in groups.items():
        requester = members[0].requester
        rows.append(
            StatisticsRow(
                utente_id=utente_id,
                nome=requester.nome,
                cognome=requester.cognome,
                email=requester.email,
                mese=mese,
                anno=anno,
                numero_richieste=len(members),
                giorni_totali_richiesti=sum(item.days for item in members),
                giorni_totali_approvati=sum(
                    item.days for item in members if item.stato is RequestStatus.APPROVED
                ),
            )
        )

    rows.sort(key=lambda row: (row.cognome.lower(), row.nome.lower(), row.utente_id, row.anno, row.mese))
    return rows


async def request_statistics(
    session: AsyncSession,
    principal: Principal,
    *,
    utente_id: int | None = None,
    mese: int | None = None,
    anno: int | None = None,
) -> list[StatisticsRow]:
    """Statistics rows for approved requests matching the optional filters."""

    require(principal, Action.VIEW_STATISTICS, message="Only managers can view statistics")
    if mese is not None and not 1 <= mese <= 12:
        raise ValidationError("Month must be between 1 and 12")

    stmt = select(LeaveRequest).where(LeaveRequest.stato == RequestStatus.APPROVED)
    if utente_id is not None:
        stmt = stmt.where(LeaveRequest.utente_id == utente_id)
    if mese is not None:
        stmt = stmt.where(extract("month", LeaveRequest.data_valutazione) == mese)
    if anno is not None:
        stmt = stmt.where(extract("year", LeaveRequest.data_valutazione) == anno)

    result = await session.execute(stmt.order_by(LeaveRequest.id))
    return aggregate(result.scalars().all())
