"""Health checks for the chain and storage dependencies.

Three checks run concurrently:
- config: the selected network exists and has a contract address
- chain: the RPC answers and contract code is present at that address
- mirror: the metadata store accepts its credentials

An unusable chain makes the service unhealthy. A failing mirror only
degrades it, since snapshots are best-effort.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import structlog

from civic_ledger.utils.errors import CivicLedgerError, ConfigurationError

if TYPE_CHECKING:
    from civic_ledger.config.schema import LedgerConfig
    from civic_ledger.interfaces.contract import ContractGateway
    from civic_ledger.interfaces.mirror import MetadataStore

log = structlog.get_logger()


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


# Worst first
_SEVERITY = (HealthStatus.UNHEALTHY, HealthStatus.UNKNOWN, HealthStatus.DEGRADED)


@dataclass
class CheckResult:
    """Outcome of one dependency check."""

    name: str
    status: HealthStatus
    message: str
    latency_ms: float | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "latency_ms": self.latency_ms,
            "details": self.details,
        }


@dataclass
class HealthReport:
    """Aggregate of all checks, as served by ``GET /api/health``."""

    healthy: bool
    status: HealthStatus
    timestamp: datetime
    checks: list[CheckResult]
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "healthy": self.healthy,
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "checks": [c.to_dict() for c in self.checks],
            "details": self.details,
        }


def overall_status(checks: list[CheckResult]) -> HealthStatus:
    """Return the worst status among ``checks``."""
    statuses = {c.status for c in checks}
    for status in _SEVERITY:
        if status in statuses:
            return status
    return HealthStatus.HEALTHY


class HealthChecker:
    """Runs the dependency checks for one network.

    Example:
        checker = HealthChecker(config, gateway=gateway, store=store)
        report = await checker.run_all_checks()
        if not report.healthy:
            print(report.to_dict())
    """

    def __init__(
        self,
        config: LedgerConfig,
        gateway: ContractGateway | None = None,
        store: MetadataStore | None = None,
        chain_id: int | None = None,
    ) -> None:
        """Initialize the health checker.

        Args:
            config: Application configuration
            gateway: Contract gateway to check. Built from config if None.
            store: Metadata store to check. Built from config if None.
            chain_id: Network to check. Defaults to the configured default.
        """
        self._config = config
        self._gateway = gateway
        self._store = store
        self._chain_id = chain_id

    async def _run(self, name: str, check: Callable[[], Awaitable[CheckResult]]) -> CheckResult:
        try:
            return await check()
        except Exception as e:
            log.exception("health_check_crashed", check=name)
            return CheckResult(
                name=name,
                status=HealthStatus.UNHEALTHY,
                message=f"Check failed with exception: {e}",
            )

    async def run_all_checks(self) -> HealthReport:
        """Run every check concurrently and aggregate the results."""
        started = datetime.now(UTC)
        checks = list(
            await asyncio.gather(
                self._run("config", self._check_config),
                self._run("chain", self._check_chain),
                self._run("mirror", self._check_mirror),
            )
        )

        status = overall_status(checks)
        healthy = status not in (HealthStatus.UNHEALTHY, HealthStatus.UNKNOWN)
        counts = {s: sum(1 for c in checks if c.status == s) for s in HealthStatus}

        log.info("health_check_complete", healthy=healthy, status=status.value)
        return HealthReport(
            healthy=healthy,
            status=status,
            timestamp=started,
            checks=checks,
            details={
                "total_checks": len(checks),
                "healthy_checks": counts[HealthStatus.HEALTHY],
                "degraded_checks": counts[HealthStatus.DEGRADED],
                "unhealthy_checks": counts[HealthStatus.UNHEALTHY],
            },
        )

    async def _check_config(self) -> CheckResult:
        """Check that the selected network has a deployed contract configured."""
        from civic_ledger.core.chain import resolve_network

        try:
            chain_id, network = resolve_network(self._config, self._chain_id)
        except ConfigurationError as e:
            return CheckResult(name="config", status=HealthStatus.UNHEALTHY, message=str(e))

        return CheckResult(
            name="config",
            status=HealthStatus.HEALTHY,
            message="Configuration valid",
            details={
                "chain_id": chain_id,
                "network": network.name,
                "contract_address": network.contract_address,
                "mirror_provider": self._config.mirror.provider,
                "admins": len(self._config.admin.addresses),
            },
        )

    async def _check_chain(self) -> CheckResult:
        """Check that the RPC answers and the contract code exists."""
        start = time.monotonic()
        try:
            gateway = self._gateway
            if gateway is None:
                from civic_ledger.core.chain import create_gateway

                gateway = create_gateway(self._config, self._chain_id)

            count = await gateway.issue_count()
        except CivicLedgerError as e:
            return CheckResult(
                name="chain",
                status=HealthStatus.UNHEALTHY,
                message=str(e),
                latency_ms=(time.monotonic() - start) * 1000,
            )

        return CheckResult(
            name="chain",
            status=HealthStatus.HEALTHY,
            message="Contract reachable",
            latency_ms=(time.monotonic() - start) * 1000,
            details={"issue_count": count, "read_only": gateway.account is None},
        )

    async def _check_mirror(self) -> CheckResult:
        """Check that the metadata store accepts its credentials."""
        start = time.monotonic()
        try:
            store = self._store
            if store is None:
                from civic_ledger.core.client import create_store

                store = create_store(self._config)
                try:
                    authenticated = await store.check_auth()
                finally:
                    await store.aclose()  # type: ignore[attr-defined]
            else:
                authenticated = await store.check_auth()
        except ValueError as e:
            return CheckResult(name="mirror", status=HealthStatus.DEGRADED, message=str(e))

        latency = (time.monotonic() - start) * 1000
        if authenticated:
            return CheckResult(
                name="mirror",
                status=HealthStatus.HEALTHY,
                message="Metadata store authenticated",
                latency_ms=latency,
            )
        return CheckResult(
            name="mirror",
            status=HealthStatus.DEGRADED,
            message="Metadata store rejected credentials",
            latency_ms=latency,
        )
