"""Configuration loading and validation."""

from .loader import load_config
from .schema import (
    AdminConfig,
    ChainConfig,
    ConfirmationConfig,
    LedgerConfig,
    LoggingConfig,
    MirrorConfig,
    NetworkConfig,
    PinataConfig,
    ServerConfig,
)

__all__ = [
    # Loader
    "load_config",
    # Root config
    "LedgerConfig",
    # Top-level configs
    "ChainConfig",
    "AdminConfig",
    "MirrorConfig",
    "ConfirmationConfig",
    "ServerConfig",
    "LoggingConfig",
    # Provider-specific configs
    "NetworkConfig",
    "PinataConfig",
]
