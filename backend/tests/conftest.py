"""Test fixtures for the backend."""
import os
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_leavedesk.db")
os.environ.setdefault("SECRET_KEY", "test-secret")

from leavedesk import models  # noqa: E402
from leavedesk.auth import register  # noqa: E402
from leavedesk.database import AsyncSessionLocal, engine  # noqa: E402
from leavedesk.main import app  # noqa: E402
from leavedesk.models import Category, Role  # noqa: E402
from leavedesk.permissions import Principal  # noqa: E402
from leavedesk.schemas import UserCreate  # noqa: E402

test_db_path = Path("test_leavedesk.db")

PASSWORD = "secret123"


@pytest_asyncio.fixture(autouse=True)
async def prepare_database():
    """Create the database schema before each test and drop it afterwards."""

    async with engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.drop_all)
    await engine.dispose()
    if test_db_path.exists():
        test_db_path.unlink()


@pytest_asyncio.fixture
async def session():
    async with AsyncSessionLocal() as db_session:
        yield db_session


@pytest_asyncio.fixture
async def client():
    """Provide an HTTP client for integration tests."""

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


async def make_principal(session, email: str, ruolo: Role, nome: str = "Mario", cognome: str = "Rossi") -> Principal:
    user = await register(
        session,
        UserCreate(nome=nome, cognome=cognome, email=email, password=PASSWORD, ruolo=ruolo),
    )
    return Principal.from_user(user)


@pytest_asyncio.fixture
async def employee(session) -> Principal:
    return await make_principal(session, "mario.rossi@example.com", Role.EMPLOYEE)


@pytest_asyncio.fixture
async def other_employee(session) -> Principal:
    return await make_principal(
        session, "giulia.bianchi@example.com", Role.EMPLOYEE, nome="Giulia", cognome="Bianchi"
    )


@pytest_asyncio.fixture
async def manager(session) -> Principal:
    return await make_principal(
        session, "anna.verdi@example.com", Role.MANAGER, nome="Anna", cognome="Verdi"
    )


@pytest_asyncio.fixture
async def vacation(session) -> Category:
    category = Category(id=1, descrizione="Ferie")
    session.add(category)
    await session.commit()
    return category
