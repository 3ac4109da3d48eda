"""LedgerClient: wires the reader, actions and mirror for one network."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog

from ..models.status import IssueStatus
from .access import AdminRegistry
from .actions import IssueActions
from .chain import create_gateway
from .dashboard import Dashboard, build_dashboard
from .mirror import MetadataMirror
from .reader import IssueReader

if TYPE_CHECKING:
    from ..config.schema import LedgerConfig
    from ..interfaces.contract import ContractGateway
    from ..interfaces.mirror import MetadataStore

log = structlog.get_logger()


class LedgerClient:
    """One wallet session against one deployed contract.

    Example:
        client = create_client(config)
        dashboard = await client.dashboard(search="pothole")
        await client.actions.fund(dashboard.issues[0], 10)
        await client.aclose()
    """

    def __init__(
        self,
        config: LedgerConfig,
        gateway: ContractGateway,
        store: MetadataStore,
        on_verified: Callable[[int], None] | None = None,
    ) -> None:
        self._config = config
        self._store = store
        self.gateway = gateway
        self.admins = AdminRegistry(config.admin.addresses)
        self.reader = IssueReader(gateway)
        self.mirror = MetadataMirror(store, background=config.mirror.background)
        self.actions = IssueActions(
            gateway,
            self.reader,
            self.mirror,
            self.admins,
            quorum=config.confirmations.quorum,
            on_verified=on_verified,
        )

    @property
    def account(self) -> str | None:
        return self.gateway.account

    async def dashboard(
        self,
        search: str = "",
        status: IssueStatus | None = None,
        include_funding: bool = True,
    ) -> Dashboard:
        """Read all issues and build the dashboard view."""
        issues = await self.reader.list_all_issues(include_funding=include_funding)
        return build_dashboard(issues, search, status)

    async def aclose(self) -> None:
        """Wait for background uploads and close the store."""
        outcomes = await self.mirror.drain()
        if outcomes:
            log.debug("mirror_drained", uploads=len(outcomes))
        aclose = getattr(self._store, "aclose", None)
        if aclose is not None:
            await aclose()


def create_store(config: LedgerConfig) -> MetadataStore:
    """Create the metadata store selected in configuration.

    Raises:
        ValueError: If the provider is not supported or not configured.
    """
    provider = config.mirror.provider

    if provider == "pinata":
        if not config.mirror.pinata:
            raise ValueError("Pinata configuration required when provider is 'pinata'")
        from ..adapters.mirror.pinata import PinataStore

        return PinataStore(config.mirror.pinata)

    raise ValueError(f"Unsupported mirror provider: {provider}")


def create_client(
    config: LedgerConfig,
    chain_id: int | None = None,
    gateway: ContractGateway | None = None,
    store: MetadataStore | None = None,
    on_verified: Callable[[int], None] | None = None,
) -> LedgerClient:
    """Factory function to create a LedgerClient with all dependencies.

    Raises:
        UnsupportedNetworkError: If the chain id is not configured.
        ContractNotDeployedError: If no contract is deployed on that network.
        ValueError: If the mirror provider is not configured.
    """
    return LedgerClient(
        config,
        gateway or create_gateway(config, chain_id),
        store or create_store(config),
        on_verified=on_verified,
    )
