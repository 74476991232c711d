"""Tests for the registration and login endpoints."""

from fastapi.testclient import TestClient

CNPJ = "11.222.333/0001-81"
PASSWORD = "Segura@123"


def test_register_creates_account(client: TestClient) -> None:
    """Tests that registration answers 201 with a token."""
    response = client.post("/api/auth/register", json={"cnpj": CNPJ, "password": PASSWORD})

    assert response.status_code == 201
    body = response.json()
    assert body["cnpj"] == "11222333000181"
    assert body["message"] == "Cadastro realizado com sucesso!"
    assert body["token"]


def test_register_rejects_weak_password(client: TestClient) -> None:
    """Tests that validation failures are 400s with the validation kind."""
    response = client.post("/api/auth/register", json={"cnpj": CNPJ, "password": "fraca"})

    assert response.status_code == 400
    assert response.json()["kind"] == "validation_error"


def test_register_missing_fields(client: TestClient) -> None:
    """Tests that an empty body is rejected with a readable message."""
    response = client.post("/api/auth/register", json={})

    assert response.status_code == 400
    assert response.json()["error"] == "CNPJ e senha são obrigatórios."


def test_register_twice_conflicts(client: TestClient) -> None:
    """Tests that a second registration of the same CNPJ is a 409."""
    client.post("/api/auth/register", json={"cnpj": CNPJ, "password": PASSWORD})

    response = client.post("/api/auth/register", json={"cnpj": CNPJ, "password": PASSWORD})

    assert response.status_code == 409
    assert response.json()["kind"] == "conflict"


def test_login_after_register(client: TestClient) -> None:
    """Tests login with good and bad credentials."""
    client.post("/api/auth/register", json={"cnpj": CNPJ, "password": PASSWORD})

    ok = client.post("/api/auth/login", json={"cnpj": CNPJ, "password": PASSWORD})
    wrong = client.post("/api/auth/login", json={"cnpj": CNPJ, "password": "Outra@123"})

    assert ok.status_code == 200
    assert "message" not in ok.json()
    assert wrong.status_code == 401
    assert wrong.json() == {"error": "Senha incorreta.", "kind": "unauthorized"}


def test_malformed_body_is_a_validation_error(client: TestClient) -> None:
    """Tests that a body that is not JSON is answered with the structured 400."""
    response = client.post(
        "/api/auth/login", content="cnpj=1", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["kind"] == "validation_error"
