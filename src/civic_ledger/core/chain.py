"""Network resolution and contract binding.

The selected chain id decides which configured network and contract
address are used. Misconfiguration is fatal and reported verbatim.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from ..utils.errors import ContractNotDeployedError, UnsupportedNetworkError
from ..utils.logging import LogEventNames

if TYPE_CHECKING:
    from ..config.schema import LedgerConfig, NetworkConfig
    from ..interfaces.contract import ContractGateway

log = structlog.get_logger()


def resolve_network(config: LedgerConfig, chain_id: int | None = None) -> tuple[int, NetworkConfig]:
    """Select the network for a chain id.

    Args:
        config: Application configuration.
        chain_id: Requested chain id. If None, the configured default is used.

    Returns:
        Tuple of (chain id, network config).

    Raises:
        UnsupportedNetworkError: If no network is configured for the chain id.
        ContractNotDeployedError: If the network's contract address is the
            zero placeholder.
    """
    selected = config.chain.default_chain_id if chain_id is None else chain_id

    network = config.chain.networks.get(selected)
    if network is None:
        log.error("unsupported_network", chain_id=selected)
        raise UnsupportedNetworkError(selected)

    if not network.is_deployed:
        log.error(LogEventNames.CONTRACT_NOT_DEPLOYED, chain_id=selected, network=network.name)
        raise ContractNotDeployedError("Contract not deployed on this network")

    return selected, network


def create_gateway(config: LedgerConfig, chain_id: int | None = None) -> ContractGateway:
    """Build the web3 contract gateway for the selected network.

    Raises:
        UnsupportedNetworkError: If the chain id is not configured.
        ContractNotDeployedError: If no contract is deployed on that network.
    """
    # Import here to avoid loading web3 for callers that inject a gateway
    from ..adapters.chain.web3_gateway import Web3ContractGateway

    selected, network = resolve_network(config, chain_id)
    log.info("contract_bound", chain_id=selected, network=network.name)

    return Web3ContractGateway(
        network,
        chain_id=selected,
        private_key=config.chain.private_key,
        sender_address=config.chain.sender_address,
        code_cache_ttl=config.chain.code_cache_ttl,
    )
