"""Integration tests for the REST API."""
import pytest
from httpx import AsyncClient

PASSWORD = "secret123"


async def _register(client: AsyncClient, email: str, ruolo: str, nome: str = "Mario", cognome: str = "Rossi") -> dict:
    response = await client.post(
        "/register",
        json={"nome": nome, "cognome": cognome, "email": email, "password": PASSWORD, "ruolo": ruolo},
    )
    assert response.status_code == 201, response.text
    return response.json()["user"]


async def _login(client: AsyncClient, email: str) -> dict:
    client.cookies.clear()
    response = await client.post("/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return response.json()["user"]


@pytest.mark.asyncio
async def test_register_login_and_session_check(client: AsyncClient) -> None:
    """A user can register, log in with the cookie and log out again."""

    user = await _register(client, "Mario.Rossi@Example.com", "Dipendente")
    assert user["email"] == "mario.rossi@example.com"
    assert user["ruolo"] == "Dipendente"
    assert "password_hash" not in user

    anonymous = await client.get("/auth/me")
    assert anonymous.status_code == 200
    assert anonymous.json() == {"authenticated": False, "user": None}

    await _login(client, "mario.rossi@example.com")
    me = await client.get("/auth/me")
    assert me.json()["authenticated"] is True
    assert me.json()["user"]["id"] == user["id"]

    logout = await client.post("/auth/logout")
    assert logout.status_code == 200
    assert "message" in logout.json()
    client.cookies.clear()
    assert (await client.get("/auth/me")).json()["authenticated"] is False


@pytest.mark.asyncio
async def test_registration_and_login_failures(client: AsyncClient) -> None:
    await _register(client, "anna.verdi@example.com", "Responsabile", "Anna", "Verdi")

    duplicate = await client.post(
        "/register",
        json={"nome": "Anna", "cognome": "Verdi", "email": "ANNA.verdi@example.com", "password": PASSWORD},
    )
    assert duplicate.status_code == 409
    assert "error" in duplicate.json()

    short_password = await client.post(
        "/register",
        json={"nome": "Luca", "cognome": "Neri", "email": "luca@example.com", "password": "123"},
    )
    assert short_password.status_code == 400
    assert "password" in short_password.json()["error"]

    bad_role = await client.post(
        "/register",
        json={"nome": "Luca", "cognome": "Neri", "email": "luca@example.com", "password": PASSWORD, "ruolo": "Admin"},
    )
    assert bad_role.status_code == 400

    wrong = await client.post("/login", json={"email": "anna.verdi@example.com", "password": "nope"})
    assert wrong.status_code == 401
    assert wrong.json() == {"error": "Invalid credentials"}


@pytest.mark.asyncio
async def test_protected_endpoints_require_a_session(client: AsyncClient) -> None:
    for path in ("/categorie", "/permessi", "/permessi/statistiche"):
        response = await client.get(path)
        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated"}

    response = await client.get("/permessi", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_bearer_header_is_accepted(client: AsyncClient) -> None:
    await _register(client, "mario.rossi@example.com", "Dipendente")
    await _login(client, "mario.rossi@example.com")
    token = client.cookies.get("access_token")
    client.cookies.clear()

    response = await client.get("/permessi", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json() == {"data": []}


@pytest.mark.asyncio
async def test_category_management(client: AsyncClient) -> None:
    await _register(client, "anna.verdi@example.com", "Responsabile", "Anna", "Verdi")
    await _register(client, "mario.rossi@example.com", "Dipendente")

    await _login(client, "anna.verdi@example.com")
    created = await client.post("/categorie", json={"categoriaId": 1, "descrizione": "Ferie"})
    assert created.status_code == 201
    assert created.json() == {"CategoriaID": 1, "Descrizione": "Ferie"}

    empty = await client.post("/categorie", json={"categoriaId": 5, "descrizione": ""})
    assert empty.status_code == 400

    duplicate = await client.post("/categorie", json={"categoriaId": 1, "descrizione": "Altro"})
    assert duplicate.status_code == 409

    updated = await client.put("/categorie/1", json={"descrizione": "Ferie annuali"})
    assert updated.json()["Descrizione"] == "Ferie annuali"
    assert (await client.put("/categorie/9", json={"descrizione": "X"})).status_code == 404

    await _login(client, "mario.rossi@example.com")
    listed = await client.get("/categorie")
    assert listed.json() == {"data": [{"CategoriaID": 1, "Descrizione": "Ferie annuali"}]}
    forbidden = await client.post("/categorie", json={"categoriaId": 2, "descrizione": "Malattia"})
    assert forbidden.status_code == 403
    assert (await client.delete("/categorie/1")).status_code == 403

    await _login(client, "anna.verdi@example.com")
    deleted = await client.delete("/categorie/1")
    assert deleted.status_code == 200
    assert (await client.get("/categorie")).json() == {"data": []}


@pytest.mark.asyncio
async def test_request_lifecycle_over_http(client: AsyncClient) -> None:
    """Employee files, manager approves, statistics reflect the approval."""

    manager = await _register(client, "anna.verdi@example.com", "Responsabile", "Anna", "Verdi")
    employee = await _register(client, "mario.rossi@example.com", "Dipendente")

    await _login(client, "anna.verdi@example.com")
    await client.post("/categorie", json={"categoriaId": 1, "descrizione": "Ferie"})

    await _login(client, "mario.rossi@example.com")
    bad_dates = await client.post(
        "/permessi",
        json={"dataInizio": "2024-03-05", "dataFine": "2024-03-01", "categoriaId": 1, "utenteId": employee["id"]},
    )
    assert bad_dates.status_code == 400

    unparsable = await client.post(
        "/permessi", json={"dataInizio": "domani", "dataFine": "2024-03-01", "categoriaId": 1}
    )
    assert unparsable.status_code == 400

    created = await client.post(
        "/permessi",
        json={
            "dataInizio": "2024-03-01",
            "dataFine": "2024-03-03",
            "categoriaId": 1,
            "motivazione": "Vacanza",
            "utenteId": employee["id"],
        },
    )
    assert created.status_code == 201, created.text
    body = created.json()
    request_id = body["RichiestaID"]
    assert body["Stato"] == "In attesa"
    assert body["UtenteValutazioneID"] is None
    assert body["RichiedenteNome"] == "Mario"
    assert body["CategoriaDescrizione"] == "Ferie"
    assert body["DataInizio"] == "2024-03-01"

    edited = await client.put(f"/permessi/{request_id}", json={"motivazione": "Ferie al mare"})
    assert edited.json()["Motivazione"] == "Ferie al mare"

    not_allowed = await client.put(
        f"/permessi/{request_id}/valuta", json={"stato": "Approvato", "utenteValutazioneId": employee["id"]}
    )
    assert not_allowed.status_code == 403

    await _login(client, "anna.verdi@example.com")
    in_use = await client.delete("/categorie/1")
    assert in_use.status_code == 409

    approved = await client.put(
        f"/permessi/{request_id}/valuta", json={"stato": "Approvato", "utenteValutazioneId": manager["id"]}
    )
    assert approved.status_code == 200
    assert approved.json()["Stato"] == "Approvato"
    assert approved.json()["ValutatoreCognome"] == "Verdi"

    again = await client.put(f"/permessi/{request_id}/valuta", json={"stato": "Rifiutato"})
    assert again.status_code == 409

    stats = await client.get("/permessi/statistiche", params={"utenteId": employee["id"]})
    assert stats.status_code == 200
    rows = stats.json()["data"]
    assert len(rows) == 1
    assert rows[0]["NumeroRichieste"] == 1
    assert rows[0]["GiorniTotaliRichiesti"] == 3
    assert rows[0]["GiorniTotaliApprovati"] == 3
    assert rows[0]["Cognome"] == "Rossi"

    filtered = await client.get("/permessi", params={"stato": "Approvato", "utenteId": employee["id"]})
    assert [r["RichiestaID"] for r in filtered.json()["data"]] == [request_id]

    await _login(client, "mario.rossi@example.com")
    refused = await client.delete(f"/permessi/{request_id}")
    assert refused.status_code == 403
    assert (await client.get("/permessi/statistiche")).status_code == 403

    await _login(client, "anna.verdi@example.com")
    removed = await client.delete(f"/permessi/{request_id}")
    assert removed.status_code == 200
    assert (await client.get(f"/permessi/{request_id}")).status_code == 404


@pytest.mark.asyncio
async def test_invalid_statistics_month(client: AsyncClient) -> None:
    await _register(client, "anna.verdi@example.com", "Responsabile", "Anna", "Verdi")
    await _login(client, "anna.verdi@example.com")

    response = await client.get("/permessi/statistiche", params={"mese": 13})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    assert (await client.get("/health")).json() == {"status": "ok"}
