"""Pydantic models for configuration schema."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
SEPOLIA_CHAIN_ID = 11155111


class NetworkConfig(BaseModel):
    """A network and the contract deployed on it."""

    name: str
    rpc_url: str
    contract_address: str = ZERO_ADDRESS

    @field_validator("contract_address")
    @classmethod
    def validate_contract_address(cls, v: str) -> str:
        """Validate contract address format."""
        from ..utils.security import validate_address_format

        if not validate_address_format(v):
            raise ValueError(f"Invalid contract address: {v}. Expected 0x followed by 40 hex digits")
        return v

    @property
    def is_deployed(self) -> bool:
        """Return False when the address is the zero placeholder."""
        return self.contract_address.lower() != ZERO_ADDRESS


class ChainConfig(BaseModel):
    """Chain access configuration."""

    default_chain_id: int = SEPOLIA_CHAIN_ID
    networks: dict[int, NetworkConfig] = {
        SEPOLIA_CHAIN_ID: NetworkConfig(name="Sepolia Testnet", rpc_url="https://rpc.sepolia.org"),
    }
    sender_address: str | None = None
    private_key: str | None = None
    code_cache_ttl: int = Field(300, ge=0, description="Seconds to trust a contract code check")

    @field_validator("sender_address")
    @classmethod
    def validate_sender_address(cls, v: str | None) -> str | None:
        """Validate sender address format."""
        from ..utils.security import validate_address_format

        if v is not None and not validate_address_format(v):
            raise ValueError(f"Invalid sender address: {v}")
        return v


class AdminConfig(BaseModel):
    """Admin allow-list. A UI gate only; the contract enforces authorization."""

    addresses: list[str] = ["0x7e9B83Ca7A390Cb5C0B37Ea7A02070B072F2F060"]

    @field_validator("addresses")
    @classmethod
    def validate_addresses(cls, v: list[str]) -> list[str]:
        """Validate admin address formats."""
        from ..utils.security import validate_address_format

        for address in v:
            if not validate_address_format(address):
                raise ValueError(f"Invalid admin address: {address}")
        return v


class PinataConfig(BaseModel):
    """Pinata-specific configuration."""

    jwt: str
    gateway: str = "gateway.pinata.cloud"
    api_url: str = "https://api.pinata.cloud"
    timeout: float = Field(30.0, gt=0)


class MirrorConfig(BaseModel):
    """Metadata mirror configuration."""

    provider: Literal["pinata"] = "pinata"
    pinata: PinataConfig | None = None
    background: bool = False


class ConfirmationConfig(BaseModel):
    """Community confirmation configuration."""

    quorum: int = Field(3, ge=1, le=100)


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = "127.0.0.1"
    port: int = Field(8000, ge=1, le=65535)


class FileLoggingConfig(BaseModel):
    """File logging configuration."""

    enabled: bool = False
    path: Path = Path("/var/log/civic-ledger/civic-ledger.log")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"
    file: FileLoggingConfig = FileLoggingConfig()


class LedgerConfig(BaseSettings):
    """Root configuration for Civic Ledger."""

    chain: ChainConfig = ChainConfig()
    admin: AdminConfig = AdminConfig()
    mirror: MirrorConfig = MirrorConfig()
    confirmations: ConfirmationConfig = ConfirmationConfig()
    server: ServerConfig = ServerConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CIVIC_LEDGER_",
        env_nested_delimiter="__",
    )
