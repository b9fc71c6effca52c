"""
HTTP tests for the student profile endpoints.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from registrar.core.database import get_db
from registrar.main import app
from registrar.modules.students.models import StudentStatus

SERVICE = "registrar.modules.students.service"


@pytest.fixture
def client(mock_db):
    async def _get_db():
        yield mock_db

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _profile(**overrides):
    fields = {
        "student_no": "2022-04567",
        "first_name": "Juan",
        "last_name": "Dela Cruz",
        "email": "juan.delacruz@hau.edu.ph",
        "phone": None,
        "address": "Angeles City",
        "course": "BS Nursing",
        "year_level": "3rd Year",
        "status": StudentStatus.ACTIVE,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


def test_get_profile_returns_camel_case(client):
    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.get_by_student_no = AsyncMock(return_value=_profile())

        response = client.get("/api/v1/profile", params={"studentNo": "2022-04567"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["student"]["studentNo"] == "2022-04567"
    assert body["student"]["yearLevel"] == "3rd Year"
    assert body["student"]["status"] == "Active"
    assert "passwordHash" not in body["student"]


def test_get_profile_without_student_no(client):
    response = client.get("/api/v1/profile")

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Student number is required."


def test_get_profile_unknown_student(client):
    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.get_by_student_no = AsyncMock(return_value=None)

        response = client.get("/api/v1/profile", params={"studentNo": "1999-00001"})

    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "STUDENT_NOT_FOUND"


def test_update_profile(client, mock_db):
    student = _profile()

    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.get_by_student_no = AsyncMock(return_value=student)

        response = client.put(
            "/api/v1/profile",
            json={"studentNo": "2022-04567", "phone": " 0917 555 0101 ", "yearLevel": "4th Year"},
        )

    assert response.status_code == 200
    assert response.json()["student"]["phone"] == "0917 555 0101"
    assert response.json()["student"]["yearLevel"] == "4th Year"
    mock_db.commit.assert_awaited_once()


def test_update_profile_database_outage(client, mock_db):
    mock_db.commit.side_effect = OperationalError("UPDATE students", {}, Exception("down"))

    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.get_by_student_no = AsyncMock(return_value=_profile())

        response = client.put("/api/v1/profile", json={"studentNo": "2022-04567", "course": "BSN"})

    assert response.status_code == 503
    assert response.json()["detail"]["error"] == "PERSISTENCE_ERROR"
