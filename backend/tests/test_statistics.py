"""Tests for the statistics aggregator."""
from datetime import date, datetime
from types import SimpleNamespace

import pytest

from leavedesk.errors import AuthorizationError, ValidationError
from leavedesk.models import RequestStatus
from leavedesk.services import requests as request_service
from leavedesk.services.statistics import aggregate, request_statistics


@pytest.fixture
def evaluated_on(monkeypatch):
    """Pin the evaluation timestamp the lifecycle engine records."""

    def _pin(moment: datetime) -> None:
        monkeypatch.setattr(request_service, "utcnow", lambda: moment)

    return _pin


async def _approved(session, manager, requester, start, end, decision=RequestStatus.APPROVED):
    leave_request = await request_service.create_request(
        session, requester, categoria_id=1, data_inizio=start, data_fine=end
    )
    return await request_service.evaluate_request(session, manager, leave_request.id, decision)


async def test_single_approved_request_scenario(
    session, employee, manager, vacation, evaluated_on
) -> None:
    evaluated_on(datetime(2024, 3, 4, 9, 30))
    await _approved(session, manager, employee, date(2024, 3, 1), date(2024, 3, 3))

    rows = await request_statistics(session, manager, utente_id=employee.id, mese=3, anno=2024)

    assert len(rows) == 1
    row = rows[0]
    assert (row.utente_id, row.mese, row.anno) == (employee.id, 3, 2024)
    assert row.numero_richieste == 1
    assert row.giorni_totali_richiesti == 3
    assert row.giorni_totali_approvati == 3
    assert row.model_dump(by_alias=True)["GiorniTotaliApprovati"] == 3


async def test_groups_by_evaluation_month_not_filing_dates(
    session, employee, other_employee, manager, vacation, evaluated_on
) -> None:
    evaluated_on(datetime(2024, 3, 28))
    await _approved(session, manager, employee, date(2024, 4, 1), date(2024, 4, 2))
    await _approved(session, manager, employee, date(2024, 4, 10), date(2024, 4, 10))
    await _approved(session, manager, other_employee, date(2024, 3, 30), date(2024, 4, 3))
    evaluated_on(datetime(2024, 4, 2))
    await _approved(session, manager, employee, date(2024, 5, 1), date(2024, 5, 5))
    await _approved(
        session, manager, employee, date(2024, 6, 1), date(2024, 6, 9), RequestStatus.REJECTED
    )

    rows = await request_statistics(session, manager, anno=2024)

    summary = [
        (row.cognome, row.mese, row.numero_richieste, row.giorni_totali_approvati) for row in rows
    ]
    assert summary == [
        ("Bianchi", 3, 1, 5),
        ("Rossi", 3, 2, 3),
        ("Rossi", 4, 1, 5),
    ]

    march = await request_statistics(session, manager, mese=3, anno=2024)
    assert {row.utente_id for row in march} == {employee.id, other_employee.id}
    assert await request_statistics(session, manager, anno=2023) == []


async def test_totals_match_raw_approved_spans(
    session, employee, other_employee, manager, vacation, evaluated_on
) -> None:
    evaluated_on(datetime(2024, 7, 15))
    spans = [
        (employee, date(2024, 7, 1), date(2024, 7, 5)),
        (employee, date(2024, 8, 1), date(2024, 8, 1)),
        (other_employee, date(2024, 7, 20), date(2024, 7, 31)),
    ]
    for requester, start, end in spans:
        await _approved(session, manager, requester, start, end)
    await _approved(
        session, manager, employee, date(2024, 9, 1), date(2024, 9, 3), RequestStatus.REJECTED
    )

    rows = await request_statistics(session, manager, mese=7, anno=2024)

    approved = await request_service.list_requests(
        session, manager, request_service.RequestFilter(stato=RequestStatus.APPROVED)
    )
    assert sum(row.giorni_totali_approvati for row in rows) == sum(r.days for r in approved)
    assert sum(row.numero_richieste for row in rows) == len(approved) == 3


async def test_statistics_are_manager_only(session, employee) -> None:
    with pytest.raises(AuthorizationError):
        await request_statistics(session, employee)


async def test_month_out_of_range_is_rejected(session, manager) -> None:
    with pytest.raises(ValidationError):
        await request_statistics(session, manager, mese=13)


def test_aggregate_counts_approved_days_independently() -> None:
    requester = SimpleNamespace(nome="Mario", cognome="Rossi", email="m@example.com")

    def item(stato, start, end):
        return SimpleNamespace(
            utente_id=1,
            requester=requester,
            stato=stato,
            data_valutazione=datetime(2024, 3, 2),
            days=(end - start).days + 1,
        )

    rows = aggregate(
        [
            item(RequestStatus.APPROVED, date(2024, 3, 1), date(2024, 3, 3)),
            item(RequestStatus.REJECTED, date(2024, 3, 10), date(2024, 3, 11)),
        ]
    )

    assert len(rows) == 1
    assert rows[0].giorni_totali_richiesti == 5
    assert rows[0].giorni_totali_approvati == 3
