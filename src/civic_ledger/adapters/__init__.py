"""Concrete implementations of the contract and storage interfaces."""

from .chain.web3_gateway import Web3ContractGateway
from .mirror.pinata import PinataStore

__all__ = [
    "PinataStore",
    "Web3ContractGateway",
]
