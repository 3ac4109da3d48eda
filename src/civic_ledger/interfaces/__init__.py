"""Protocol definitions for pluggable adapters."""

from .contract import ContractGateway
from .mirror import MetadataStore

__all__ = ["ContractGateway", "MetadataStore"]
