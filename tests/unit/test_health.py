"""Tests for the health check module."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from civic_ledger.config.schema import NetworkConfig
from civic_ledger.utils.errors import ChainCallError, ContractNotDeployedError
from civic_ledger.utils.health import (
    CheckResult,
    HealthChecker,
    HealthReport,
    HealthStatus,
    overall_status,
)


class TestHealthStatus:
    """Tests for HealthStatus enum."""

    def test_health_status_values(self) -> None:
        """Test that all expected status values exist."""
        assert HealthStatus.HEALTHY.value == "healthy"
        assert HealthStatus.DEGRADED.value == "degraded"
        assert HealthStatus.UNHEALTHY.value == "unhealthy"
        assert HealthStatus.UNKNOWN.value == "unknown"


class TestOverallStatus:
    """Tests for status aggregation."""

    @pytest.mark.parametrize(
        "statuses,expected",
        [
            ([HealthStatus.HEALTHY, HealthStatus.HEALTHY], HealthStatus.HEALTHY),
            ([HealthStatus.HEALTHY, HealthStatus.DEGRADED], HealthStatus.DEGRADED),
            ([HealthStatus.DEGRADED, HealthStatus.UNHEALTHY], HealthStatus.UNHEALTHY),
            ([HealthStatus.UNKNOWN, HealthStatus.DEGRADED], HealthStatus.UNKNOWN),
            ([], HealthStatus.HEALTHY),
        ],
    )
    def test_worst_status_wins(self, statuses, expected) -> None:
        checks = [CheckResult(name=f"c{i}", status=s, message="") for i, s in enumerate(statuses)]
        assert overall_status(checks) == expected


class TestHealthReport:
    """Tests for HealthReport dataclass."""

    def test_health_report_to_dict(self) -> None:
        """Test converting HealthReport to dictionary."""
        timestamp = datetime(2026, 2, 4, 12, 0, 0, tzinfo=UTC)
        report = HealthReport(
            healthy=True,
            status=HealthStatus.HEALTHY,
            timestamp=timestamp,
            checks=[
                CheckResult(
                    name="chain",
                    status=HealthStatus.HEALTHY,
                    message="Contract reachable",
                    latency_ms=10.0,
                ),
            ],
            details={"total": 1},
        )

        result = report.to_dict()

        assert result["status"] == "healthy"
        assert result["timestamp"] == "2026-02-04T12:00:00+00:00"
        assert result["checks"][0]["name"] == "chain"
        assert result["checks"][0]["latency_ms"] == 10.0
        assert result["details"] == {"total": 1}


class TestHealthChecker:
    """Tests for HealthChecker class."""

    @pytest.fixture
    def mock_gateway(self) -> MagicMock:
        """Create a mock contract gateway."""
        gateway = MagicMock()
        gateway.issue_count = AsyncMock(return_value=4)
        gateway.account = None
        return gateway

    async def test_all_healthy(self, config, mock_gateway, store) -> None:
        """Test a reachable contract and authenticated store."""
        checker = HealthChecker(config, gateway=mock_gateway, store=store)
        report = await checker.run_all_checks()

        assert report.healthy is True
        assert report.status == HealthStatus.HEALTHY
        assert {c.name for c in report.checks} == {"config", "chain", "mirror"}
        chain = next(c for c in report.checks if c.name == "chain")
        assert chain.details == {"issue_count": 4, "read_only": True}

    async def test_undeployed_network_unhealthy(self, config, mock_gateway, store) -> None:
        """Test the zero address makes the config check fail."""
        config.chain.networks[11155111] = NetworkConfig(name="Sepolia", rpc_url="https://rpc.example")
        checker = HealthChecker(config, gateway=mock_gateway, store=store)
        result = await checker._check_config()

        assert result.status == HealthStatus.UNHEALTHY
        assert result.message == "Contract not deployed on this network"

    async def test_unsupported_chain_unhealthy(self, config, mock_gateway, store) -> None:
        """Test an unknown chain id."""
        checker = HealthChecker(config, gateway=mock_gateway, store=store, chain_id=1)
        result = await checker._check_config()

        assert result.status == HealthStatus.UNHEALTHY
        assert "Unsupported chain ID: 1" in result.message

    @pytest.mark.parametrize(
        "error",
        [ChainCallError("issueCount failed"), ContractNotDeployedError("No contract found")],
    )
    async def test_chain_failure_unhealthy(self, config, mock_gateway, store, error) -> None:
        """Test chain failures make the service unhealthy."""
        mock_gateway.issue_count = AsyncMock(side_effect=error)
        report = await HealthChecker(config, gateway=mock_gateway, store=store).run_all_checks()

        assert report.healthy is False
        assert report.status == HealthStatus.UNHEALTHY

    async def test_mirror_failure_degraded(self, config, mock_gateway, store) -> None:
        """Test a rejected store credential only degrades the service."""
        store.fail = True
        report = await HealthChecker(config, gateway=mock_gateway, store=store).run_all_checks()

        assert report.healthy is True
        assert report.status == HealthStatus.DEGRADED
        assert report.details["degraded_checks"] == 1

    async def test_unexpected_exception_captured(self, config, mock_gateway, store) -> None:
        """Test an exception escaping a check is reported, not raised."""
        mock_gateway.issue_count = AsyncMock(side_effect=RuntimeError("boom"))
        report = await HealthChecker(config, gateway=mock_gateway, store=store).run_all_checks()

        assert report.healthy is False
        assert any("boom" in c.message for c in report.checks)
