"""
tests/test_api_routes.py

HTTP surface: envelopes, token gate, upload, login and the dashboard
Basic-Auth gate. The lifespan (DB checks) is not entered; the session,
upload service and dashboard settings are overridden.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from types import MappingProxyType

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.config import DashboardSettings, get_dashboard_settings
from app.domain.identity import SubmitterIdentity
from app.domain.uploads import DedupRegistry
from app.main import app
from app.repositories.upload_file_storage import UploadFileStorage
from app.security.tokens import get_token_service
from app.services.csv_upload_service import CSVUploadService, get_csv_upload_service
from db.session import get_db

KNOWN_CTC = "01-23-4567-890123"


class FakeRegistryClient:
    async def fetch_registry(self) -> DedupRegistry:
        return DedupRegistry(
            ctc_numbers=frozenset({KNOWN_CTC}),
            elicitations=MappingProxyType({"E-DONE": True}),
        )


@pytest.fixture()
def client(sqlite_session: Session, tmp_path: Path) -> Iterator[TestClient]:
    upload_service = CSVUploadService(registry_client=FakeRegistryClient(), storage=UploadFileStorage(tmp_path))
    app.dependency_overrides[get_db] = lambda: sqlite_session
    app.dependency_overrides[get_csv_upload_service] = lambda: upload_service
    app.dependency_overrides[get_dashboard_settings] = lambda: DashboardSettings(
        users={"dash": "board"},
        regions=("Mbeya Region",),
    )
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers(identity: SubmitterIdentity) -> dict[str, str]:
    return {"x-access-token": get_token_service().issue(identity)}


def _csv(name: str, content: bytes, content_type: str = "text/csv") -> dict:
    return {"file": (name, content, content_type)}


class TestEnvelope:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "ucs-uploader"}

    def test_upload_root_is_public(self, client: TestClient) -> None:
        response = client.get("/upload")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["request"] == "/upload"
        assert body["payload"] == {"token": None, "authenticated": False, "message": "Root path reached"}

    def test_upload_root_reports_authenticated_caller(self, client: TestClient, auth_headers: dict) -> None:
        response = client.get("/upload", headers=auth_headers)
        assert response.json()["payload"]["authenticated"] is True


class TestTokenGate:
    def test_missing_token(self, client: TestClient) -> None:
        response = client.get("/protected")

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["request"] == "/protected"
        assert body["payload"] == {"token": None, "authenticated": False, "message": "Auth token is not supplied."}

    def test_bearer_authorization_header(self, client: TestClient, identity: SubmitterIdentity) -> None:
        token = get_token_service().issue(identity)

        response = client.get("/protected", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["payload"]["message"] == "Protected route has been reached!"

    @pytest.mark.parametrize("scheme", ["bearer", "BEARER", "Bearer"])
    def test_bearer_scheme_is_case_insensitive(
        self, client: TestClient, identity: SubmitterIdentity, scheme: str
    ) -> None:
        token = get_token_service().issue(identity)

        response = client.get("/protected", headers={"Authorization": f"{scheme} {token}"})

        assert response.status_code == 200

    def test_garbage_token(self, client: TestClient) -> None:
        response = client.get("/protected", headers={"x-access-token": "not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["payload"]["message"].startswith("Invalid token")


class TestUploadEndpoint:
    def test_upload_requires_token(self, client: TestClient) -> None:
        response = client.post("/upload", files=_csv("20240101_clients_a.csv", b"11-22-3333-444444\n"))
        assert response.status_code == 401

    def test_missing_file(self, client: TestClient, auth_headers: dict) -> None:
        response = client.post("/upload", headers=auth_headers, data={"comment": "none"})

        assert response.status_code == 400
        assert response.json()["payload"]["message"] == "No file provided!"
        assert response.json()["payload"]["authenticated"] is True

    def test_non_csv_file(self, client: TestClient, auth_headers: dict) -> None:
        response = client.post(
            "/upload",
            headers=auth_headers,
            files=_csv("20240101_clients_a.txt", b"x", "text/plain"),
        )

        assert response.status_code == 400
        assert response.json()["payload"]["message"] == "Invalid file type. Only CSV files are allowed!"

    def test_overlong_file_name(self, client: TestClient, auth_headers: dict, tmp_path: Path) -> None:
        name = "20240101_clients_" + "a" * 300 + ".csv"

        response = client.post("/upload", headers=auth_headers, files=_csv(name, b"11-22-3333-444444\n"))

        assert response.status_code == 400
        assert response.json()["payload"]["message"].startswith("File name is too long.")
        assert not (tmp_path / "index_uploads").exists()

    def test_invalid_upload_type(self, client: TestClient, auth_headers: dict) -> None:
        response = client.post(
            "/upload",
            headers=auth_headers,
            files=_csv("20240101_patients_a.csv", b"11-22-3333-444444\n"),
        )

        assert response.status_code == 400
        assert response.json()["payload"]["message"] == "Invalid upload type: patients"

    def test_accepted_upload(self, client: TestClient, auth_headers: dict, tmp_path: Path) -> None:
        response = client.post(
            "/upload",
            headers=auth_headers,
            files=_csv("20240101_clients_a.csv", b"11-22-3333-444444\nbad\n"),
        )

        assert response.status_code == 201
        payload = response.json()["payload"]
        assert payload["message"] == "File uploaded, processed, and saved successfully!"
        assert payload["rejected"] is True
        assert payload["rejectedRows"] == [
            {"rowNumber": 2, "values": ["bad"], "rejectionReason": "Invalid CTC number"}
        ]
        assert payload["stats"]["clientFiles"] == 1
        assert payload["stats"]["acceptedRecords"] == 1
        assert (tmp_path / "index_uploads" / "20240101_clients_a.csv").exists()

    def test_all_rows_rejected(self, client: TestClient, auth_headers: dict) -> None:
        response = client.post(
            "/upload",
            headers=auth_headers,
            files=_csv("20240101_clients_a.csv", f"{KNOWN_CTC}\n".encode()),
        )

        assert response.status_code == 400
        payload = response.json()["payload"]
        assert payload["message"] == "All rows were rejected."
        assert payload["rejectedRows"][0]["rejectionReason"] == "Duplicate CTC number in clients file"

    def test_empty_file(self, client: TestClient, auth_headers: dict) -> None:
        response = client.post("/upload", headers=auth_headers, files=_csv("20240101_clients_a.csv", b""))

        assert response.status_code == 200
        assert response.json()["payload"]["message"] == "File contained no rows to import."


class TestLogin:
    def test_missing_credentials(self, client: TestClient) -> None:
        response = client.post("/login", json={"username": "devuser"})

        assert response.status_code == 400
        assert response.json()["payload"]["message"] == "Username or Password is missing!"

    def test_dev_login_returns_usable_token(self, client: TestClient) -> None:
        response = client.post("/login", json={"username": "devuser", "password": "devpass"})

        assert response.status_code == 200
        payload = response.json()["payload"]
        assert payload["message"] == "Dev login successful"
        assert payload["stats"]["clientFiles"] == 0
        assert payload["regionStats"] is None

        protected = client.get("/protected", headers={"x-access-token": payload["token"]})
        assert protected.status_code == 200


class TestDashboardGate:
    def test_requires_basic_credentials(self, client: TestClient) -> None:
        response = client.get(
            "/dashboard/paediatric-contacts",
            params={"locationid": "HFR-1", "startdate": "2024-01-01", "enddate": "2024-01-31"},
        )

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Basic"
        assert response.json()["payload"]["message"] == "Unauthorized"

    def test_wrong_password(self, client: TestClient) -> None:
        response = client.post(
            "/dashboard/index-clients",
            auth=("dash", "wrong"),
            json={"location": ["HFR-1"], "startDate": "2024-01-01", "endDate": "2024-01-31"},
        )
        assert response.status_code == 401

    def test_paediatric_contacts(self, client: TestClient) -> None:
        response = client.get(
            "/dashboard/paediatric-contacts",
            auth=("dash", "board"),
            params={"locationid": "HFR-1", "startdate": "2024-01-01", "enddate": "2024-01-31"},
        )

        assert response.status_code == 200
        assert len(response.json()["payload"]) == 16

    def test_reversed_range_is_rejected(self, client: TestClient) -> None:
        response = client.get(
            "/dashboard/paediatric-outcomes",
            auth=("dash", "board"),
            params={"locationid": "HFR-1", "startdate": "2024-02-01", "enddate": "2024-01-01"},
        )
        assert response.status_code == 400

    def test_summary_requires_locations(self, client: TestClient) -> None:
        response = client.post(
            "/dashboard/elicitations",
            auth=("dash", "board"),
            json={"location": [], "startDate": "2024-01-01", "endDate": "2024-01-31"},
        )

        assert response.status_code == 400
        assert response.json()["payload"]["message"].startswith("Invalid request")

    def test_summary_returns_grouped_payload(self, client: TestClient) -> None:
        response = client.post(
            "/dashboard/outcomes",
            auth=("dash", "board"),
            json={"location": ["HFR-1"], "startDate": "2024-01-01", "endDate": "2024-01-31"},
        )

        assert response.status_code == 200
        assert response.json()["payload"] == {}
