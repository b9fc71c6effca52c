"""
HTTP tests for admin account creation.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from registrar.core.auth import get_current_admin_user
from registrar.core.database import get_db
from registrar.core.rate_limit import reset_memory_store
from registrar.main import app
from registrar.modules.admins.models import AdminRole

SERVICE = "registrar.modules.admins.service"


@pytest.fixture
def client(mock_db, admin):
    async def _get_db():
        yield mock_db

    reset_memory_store()
    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_current_admin_user] = lambda: admin
    yield TestClient(app)
    app.dependency_overrides.clear()
    reset_memory_store()


def test_create_admin_returns_201(client):
    created = SimpleNamespace(
        id=uuid4(),
        email="maria.santos@hau.edu.ph",
        first_name="Maria",
        last_name="Santos",
        role=AdminRole.ADMIN,
    )

    with patch(f"{SERVICE}.AdminRepository") as mock_repo:
        mock_repo.get_by_email = AsyncMock(return_value=None)
        mock_repo.create = AsyncMock(return_value=created)

        response = client.post(
            "/api/v1/admin/admins",
            json={
                "email": "Maria.Santos@hau.edu.ph",
                "password": "s3cret",
                "firstName": "Maria",
                "lastName": "Santos",
            },
        )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["admin"] == {
        "id": str(created.id),
        "email": "maria.santos@hau.edu.ph",
        "firstName": "Maria",
        "lastName": "Santos",
        "role": "admin",
    }


def test_create_admin_missing_fields_returns_400(client):
    response = client.post("/api/v1/admin/admins", json={"email": "maria.santos@hau.edu.ph"})

    assert response.status_code == 400
    assert response.json()["detail"] == {
        "error": "VALIDATION_ERROR",
        "message": "All fields are required.",
    }


def test_create_admin_duplicate_returns_409(client):
    with patch(f"{SERVICE}.AdminRepository") as mock_repo:
        mock_repo.get_by_email = AsyncMock(return_value=SimpleNamespace(id=uuid4()))

        response = client.post(
            "/api/v1/admin/admins",
            json={
                "email": "registrar@hau.edu.ph",
                "password": "s3cret",
                "firstName": "Registrar",
                "lastName": "Staff",
            },
        )

    assert response.status_code == 409
    assert response.json()["detail"]["error"] == "DUPLICATE_ADMIN"


def test_create_admin_requires_token():
    reset_memory_store()
    response = TestClient(app).post("/api/v1/admin/admins", json={})

    assert response.status_code in (401, 403)
