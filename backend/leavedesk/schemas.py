"""Pydantic schemas used across the backend API.

Field names on the wire follow the browser client (``CategoriaID``,
``DataInizio``, ...); Python attribute names mirror the ORM columns.
"""
from datetime import date, datetime, timedelta, timezone

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .models import RequestStatus, Role


class WireModel(BaseModel):
    """Accepts either the alias or the attribute name, reads ORM objects."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class TokenData(BaseModel):
    """Information encoded into session JWTs."""

    sub: str
    email: str
    ruolo: Role


class UserLogin(BaseModel):
    """Credentials supplied during login."""

    email: EmailStr
    password: str = Field(min_length=1)


class UserCreate(BaseModel):
    """Payload for user registration."""

    nome: str = Field(min_length=2, max_length=100)
    cognome: str = Field(min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)
    ruolo: Role = Role.EMPLOYEE

    model_config = ConfigDict(str_strip_whitespace=True)


class UserRead(WireModel):
    """Public representation of a user."""

    id: int
    nome: str
    cognome: str
    email: str
    ruolo: Role


class UserEnvelope(BaseModel):
    message: str | None = None
    user: UserRead


class SessionStatus(BaseModel):
    """Answer of the session check: never an error, just a verdict."""

    authenticated: bool
    user: UserRead | None = None


class Message(BaseModel):
    message: str


class CategoryCreate(WireModel):
    id: int = Field(alias="categoriaId")
    descrizione: str


class CategoryUpdate(WireModel):
    descrizione: str


class CategoryRead(WireModel):
    id: int = Field(alias="CategoriaID")
    descrizione: str = Field(alias="Descrizione")


class CategoryList(BaseModel):
    data: list[CategoryRead]


class LeaveRequestCreate(WireModel):
    data_inizio: date = Field(alias="dataInizio")
    data_fine: date = Field(alias="dataFine")
    categoria_id: int = Field(alias="categoriaId")
    motivazione: str | None = None
    utente_id: int | None = Field(default=None, alias="utenteId")


class LeaveRequestUpdate(WireModel):
    """Partial edit of a pending request; omitted fields stay as they are."""

    data_inizio: date | None = Field(default=None, alias="dataInizio")
    data_fine: date | None = Field(default=None, alias="dataFine")
    categoria_id: int | None = Field(default=None, alias="categoriaId")
    motivazione: str | None = None


class Evaluation(WireModel):
    stato: RequestStatus
    utente_valutazione_id: int | None = Field(default=None, alias="utenteValutazioneId")


class LeaveRequestRead(WireModel):
    id: int = Field(alias="RichiestaID")
    utente_id: int = Field(alias="UtenteID")
    requester_nome: str = Field(alias="RichiedenteNome")
    requester_cognome: str = Field(alias="RichiedenteCognome")
    requester_email: str = Field(alias="RichiedenteEmail")
    categoria_id: int = Field(alias="CategoriaID")
    categoria_descrizione: str = Field(alias="CategoriaDescrizione")
    data_inizio: date = Field(alias="DataInizio")
    data_fine: date = Field(alias="DataFine")
    motivazione: str | None = Field(default=None, alias="Motivazione")
    stato: RequestStatus = Field(alias="Stato")
    data_richiesta: datetime = Field(alias="DataRichiesta")
    utente_valutazione_id: int | None = Field(default=None, alias="UtenteValutazioneID")
    evaluator_nome: str | None = Field(default=None, alias="ValutatoreNome")
    evaluator_cognome: str | None = Field(default=None, alias="ValutatoreCognome")
    data_valutazione: datetime | None = Field(default=None, alias="DataValutazione")


class LeaveRequestList(BaseModel):
    data: list[LeaveRequestRead]


class StatisticsRow(WireModel):
    """One (employee, month, year) group of approved requests."""

    utente_id: int = Field(alias="UtenteID")
    nome: str = Field(alias="Nome")
    cognome: str = Field(alias="Cognome")
    email: str = Field(alias="Email")
    mese: int = Field(alias="Mese")
    anno: int = Field(alias="Anno")
    numero_richieste: int = Field(alias="NumeroRichieste")
    giorni_totali_richiesti: int = Field(alias="GiorniTotaliRichiesti")
    giorni_totali_approvati: int = Field(alias="GiorniTotaliApprovati")


class StatisticsList(BaseModel):
    data: list[StatisticsRow]


def compute_expiry(minutes: int) -> datetime:
    """Return an absolute expiration timestamp for tokens."""

    return datetime.now(timezone.utc) + timedelta(minutes=minutes)
