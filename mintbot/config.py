"""
Centralized Configuration Management

This module provides configuration for the mintbot application.
It loads and validates configuration from environment variables and .env files,
grouped into nested sections for the chain, metadata storage, AI and collector.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Deployed ERC-721 contract exposing safeMint(address to, string uri)
DEPLOYED_CONTRACT_ADDRESS = "0xDe552b9Ef4028d1B5f06203Fa25c3D1Fc5945785"

# Base Sepolia
CHAIN_ID = 84532

DEFAULT_EXPLORER_URL = "https://sepolia.basescan.org"


class ChainConfig(BaseSettings):
    """Chain access and signing configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CHAIN_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    private_key: Optional[str] = None
    rpc_url: Optional[str] = None
    ens_rpc_url: str = "https://ethereum-rpc.publicnode.com"
    explorer_url: str = DEFAULT_EXPLORER_URL
    request_timeout: float = 30.0


class PinataConfig(BaseSettings):
    """Pinata (IPFS pinning) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PINATA_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    jwt: Optional[str] = None
    api_url: str = "https://api.pinata.cloud"
    gateway_url: str = "https://gateway.pinata.cloud/ipfs"
    timeout: float = 60.0


class AIConfig(BaseSettings):
    """AI and language model configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AI_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    openrouter_api_key: Optional[str] = None
    api_url: str = "https://openrouter.ai/api/v1/chat/completions"
    small_model: str = "openai/gpt-4o-mini"
    medium_model: str = "openai/gpt-4o"
    large_model: str = "openai/gpt-4o"
    temperature: float = 0.2
    max_tokens: int = 1000
    timeout: float = 45.0
    http_referer: str = "https://github.com/mintbot"
    x_title: str = "Mintbot"


class CollectorConfig(BaseSettings):
    """NFT data collection configuration."""

    model_config = SettingsConfigDict(
        env_prefix="COLLECTOR_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    agent_name: str = "Mintbot"
    record_ttl_seconds: int = 600
    store_backend: str = "memory"  # "memory" or "sqlite"
    db_path: str = "data/mintbot.db"


class AppConfig(BaseSettings):
    """
    Centralized application configuration with nested sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    log_level: str = "INFO"
    log_format: str = "text"
    log_file: Optional[str] = None

    # Nested configuration sections
    chain: ChainConfig = Field(default_factory=ChainConfig)
    pinata: PinataConfig = Field(default_factory=PinataConfig)
    ai: AIConfig = Field(default_factory=AIConfig)
    collector: CollectorConfig = Field(default_factory=CollectorConfig)

    def check_required(self) -> List[str]:
        """Return the environment variable names of required settings that are unset."""
        required_vars = {
            "CHAIN_PRIVATE_KEY": self.chain.private_key,
            "CHAIN_RPC_URL": self.chain.rpc_url,
            "PINATA_JWT": self.pinata.jwt,
            "AI_OPENROUTER_API_KEY": self.ai.openrouter_api_key,
        }
        return [name for name, value in required_vars.items() if not value]


def create_settings() -> AppConfig:
    """Create settings instance from environment variables and .env files only."""
    return AppConfig()
