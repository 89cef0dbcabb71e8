"""
Configuration management for the Terra Relayer.

Supports configuration via environment variables and .env files.
The configuration is built once by the caller and handed to every component.
"""

from typing import Optional

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RelayerConfig(BaseSettings):
    """
    Configuration settings for the Terra Relayer.

    All settings can be configured via environment variables with the RELAYER_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="RELAYER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Ledger settings
    lcd_url: str = Field(
        default="http://localhost:1317",
        description="LCD REST endpoint of the destination ledger"
    )
    chain_id: str = Field(
        default="columbus-5",
        description="Chain identifier used in the sign document"
    )
    address_prefix: str = Field(
        default="terra",
        description="Bech32 human readable prefix of account addresses"
    )

    # Wallet settings
    mnemonic: Optional[SecretStr] = Field(
        default=None,
        description="BIP-39 mnemonic of the relayer wallet"
    )

    # Gas settings
    gas_price: str = Field(
        default="0.15uusd",
        description="Default gas price used when the oracle is unavailable"
    )
    gas_price_endpoint: Optional[str] = Field(
        default=None,
        description="Gas price oracle URL returning a denom -> price JSON mapping"
    )
    gas_price_denom: str = Field(
        default="uusd",
        description="Denom to read from the gas price oracle"
    )
    gas_adjustment: float = Field(
        default=1.4,
        gt=0,
        description="Multiplier applied to simulated gas usage"
    )

    # Relay policy
    donation_address: str = Field(
        default="",
        description="Recipient used when a deposit names an invalid address"
    )
    decimal_shift: int = Field(
        default=12,
        ge=0,
        description="Low digits dropped when rescaling 18-decimal amounts"
    )
    min_amount_digits: int = Field(
        default=13,
        ge=1,
        description="Minimum number of digits in a raw deposit amount"
    )
    gas_surcharge: int = Field(
        default=100_000,
        ge=0,
        description="Extra gas added for tax-bearing transfers"
    )
    duplicate_tx_code: int = Field(
        default=19,
        description="Broadcast result code meaning the tx is already pending"
    )

    # Transport settings
    request_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Timeout applied to every outbound HTTP call"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )

    @model_validator(mode="after")
    def _check_amount_policy(self) -> "RelayerConfig":
        if self.min_amount_digits <= self.decimal_shift:
            raise ValueError("min_amount_digits must exceed decimal_shift")
        return self

    @property
    def mnemonic_value(self) -> Optional[str]:
        """Get the plain mnemonic, if configured."""
        return self.mnemonic.get_secret_value() if self.mnemonic else None
