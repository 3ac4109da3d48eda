"""Tests for the HTTP endpoints."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from civic_ledger.utils.health import HealthReport, HealthStatus
from civic_ledger.web.app import create_app

ADMIN = "0x7e9B83Ca7A390Cb5C0B37Ea7A02070B072F2F060"
CITIZEN = "0x1111111111111111111111111111111111111111"


@pytest.fixture
def client(store) -> TestClient:
    return TestClient(create_app(store))


class TestUploadToIpfs:
    """Test POST /api/upload-to-ipfs."""

    def test_upload(self, client, store) -> None:
        """Test a complete upload returns both hashes."""
        response = client.post(
            "/api/upload-to-ipfs",
            files={"file": ("pothole.jpg", b"jpeg-bytes", "image/jpeg")},
            data={"location": "Elm St", "description": "Pothole", "reporter": CITIZEN},
        )
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "imageHash": "QmCid0",
            "metadataHash": "QmCid1",
        }
        assert store.files[0] == ("pothole.jpg", b"jpeg-bytes", "image/jpeg")

    @pytest.mark.parametrize("missing", ["location", "description", "reporter"])
    def test_missing_field(self, client, store, missing) -> None:
        """Test each required form field."""
        data = {"location": "Elm St", "description": "Pothole", "reporter": CITIZEN}
        del data[missing]
        response = client.post(
            "/api/upload-to-ipfs",
            files={"file": ("pothole.jpg", b"jpeg-bytes", "image/jpeg")},
            data=data,
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}
        assert store.files == []

    def test_missing_file(self, client) -> None:
        """Test the photo is required."""
        response = client.post(
            "/api/upload-to-ipfs",
            data={"location": "Elm St", "description": "Pothole", "reporter": CITIZEN},
        )
        assert response.status_code == 400

    def test_storage_failure(self, client, store) -> None:
        """Test upstream failures return 500."""
        store.fail = True
        response = client.post(
            "/api/upload-to-ipfs",
            files={"file": ("pothole.jpg", b"jpeg-bytes", "image/jpeg")},
            data={"location": "Elm St", "description": "Pothole", "reporter": CITIZEN},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to upload to IPFS"}


class TestUpdateIssueStatus:
    """Test POST /api/update-issue-status."""

    def test_status_snapshot(self, client, store) -> None:
        """Test the pinned status document."""
        response = client.post(
            "/api/update-issue-status",
            json={
                "issueId": 4,
                "imageHash": "QmImage",
                "newStatus": "Resolved",
                "adminAddress": ADMIN,
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["metadataCid"] == "QmCid0"
        assert body["statusMetadata"]["type"] == "status_update"
        assert body["statusMetadata"]["updatedBy"] == ADMIN
        assert store.documents[0][0] == body["statusMetadata"]

    @pytest.mark.parametrize("missing", ["issueId", "newStatus", "adminAddress"])
    def test_missing_field(self, client, missing) -> None:
        """Test each required field."""
        payload = {"issueId": 4, "newStatus": "Resolved", "adminAddress": ADMIN}
        del payload[missing]
        response = client.post("/api/update-issue-status", json=payload)
        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}

    def test_unknown_status(self, client, store) -> None:
        """Test unknown status names are rejected."""
        response = client.post(
            "/api/update-issue-status",
            json={"issueId": 4, "newStatus": "Closed", "adminAddress": ADMIN},
        )
        assert response.status_code == 400
        assert store.documents == []

    def test_invalid_issue_id(self, client, store) -> None:
        """Test validation errors come back as one short message."""
        response = client.post(
            "/api/update-issue-status",
            json={"issueId": "four", "newStatus": "Resolved", "adminAddress": ADMIN},
        )
        assert response.status_code == 400
        error = response.json()["error"]
        assert error.startswith("Invalid status update: Input should be a valid integer")
        assert "\n" not in error
        assert store.documents == []

    def test_invalid_json(self, client) -> None:
        """Test a malformed body."""
        response = client.post(
            "/api/update-issue-status",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400

    def test_storage_failure(self, client, store) -> None:
        """Test upstream failures return 500."""
        store.fail = True
        response = client.post(
            "/api/update-issue-status",
            json={"issueId": 4, "newStatus": "Resolved", "adminAddress": ADMIN},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to update issue status"}


class TestUpdateIssueFunding:
    """Test POST /api/update-issue-funding."""

    def test_funding_snapshot(self, client) -> None:
        """Test the pinned funding document."""
        response = client.post(
            "/api/update-issue-funding",
            json={
                "issueId": 2,
                "action": "fund",
                "amount": "25",
                "userAddress": CITIZEN,
                "totalFunding": 125,
                "fundsUsed": 30,
                "available": 95,
            },
        )
        assert response.status_code == 200
        metadata = response.json()["fundingMetadata"]
        assert metadata["type"] == "funding_update"
        assert metadata["amount"] == 25
        assert metadata["available"] == 95

    def test_missing_amount(self, client) -> None:
        """Test a zero amount counts as missing."""
        response = client.post(
            "/api/update-issue-funding",
            json={"issueId": 2, "action": "fund", "amount": 0, "userAddress": CITIZEN},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}

    def test_invalid_action(self, client) -> None:
        """Test only fund and withdraw are accepted."""
        response = client.post(
            "/api/update-issue-funding",
            json={"issueId": 2, "action": "refund", "amount": 5, "userAddress": CITIZEN},
        )
        assert response.status_code == 400
        assert "error" in response.json()

    def test_storage_failure(self, client, store) -> None:
        """Test upstream failures return 500."""
        store.fail = True
        response = client.post(
            "/api/update-issue-funding",
            json={"issueId": 2, "action": "withdraw", "amount": 5, "userAddress": ADMIN},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to update issue funding"}


class TestHealthEndpoint:
    """Test GET /api/health."""

    def test_without_checker(self, client) -> None:
        """Test the endpoint answers without a configured checker."""
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "unknown"

    @pytest.mark.parametrize("healthy,code", [(True, 200), (False, 503)])
    def test_with_checker(self, store, healthy, code) -> None:
        """Test the report is returned with a matching status code."""
        checker = MagicMock()
        checker.run_all_checks = AsyncMock(
            return_value=HealthReport(
                healthy=healthy,
                status=HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY,
                timestamp=datetime.now(UTC),
                checks=[],
            )
        )
        response = TestClient(create_app(store, checker)).get("/api/health")
        assert response.status_code == code
        assert response.json()["healthy"] is healthy
