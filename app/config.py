from pathlib import Path
from typing import Dict, List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")

    # LLM Provider Settings
    llm_provider: str = Field(default="anthropic", description="Default LLM provider")
    anthropic_api_key: str = Field(
        default="",
        description="Anthropic API key",
        validation_alias=AliasChoices("anthropic_api_key", "ANTHROPIC_API_KEY", "CLAUDE_API_KEY"),
    )

    # LLM Configuration
    llm_model: str = Field(default="claude-sonnet-4-20250514", description="Default LLM model")
    max_tokens: int = Field(default=4000, description="Maximum tokens for LLM response")
    temperature: float = Field(default=0.2, description="LLM temperature setting")

    # Tool loop
    max_tool_iterations: int = Field(
        default=5,
        ge=1,
        le=10,
        description="Maximum oracle round-trips per chat request",
    )
    oracle_timeout_seconds: float = Field(default=60.0, gt=0, description="Timeout for a single oracle call")
    tool_timeout_seconds: float = Field(default=20.0, gt=0, description="Timeout for a single tool execution")

    # Chains
    educhain_rpc_url: str = Field(
        default="https://rpc.edu-chain.raas.gelato.cloud",
        description="EDU Chain JSON-RPC endpoint",
    )
    arbitrum_rpc_url: str = Field(
        default="https://arb1.arbitrum.io/rpc",
        description="Arbitrum One JSON-RPC endpoint",
    )
    bsc_rpc_url: str = Field(
        default="https://bsc-dataseed.binance.org",
        description="BNB Smart Chain JSON-RPC endpoint",
    )
    rpc_timeout_seconds: float = Field(default=15.0, description="JSON-RPC request timeout")
    default_chain_id: int = Field(default=41923, description="Chain used when nothing else identifies one")

    # External services
    bridge_api_base_url: str = Field(
        default="https://yuzu-api-production.r8edev.xyz/bridge/arbMainnet/eduMainnet",
        description="Arbitrum <-> EDU Chain bridge backend",
    )
    sailfish_subgraph_url: str = Field(
        default="",
        description="SailFish DEX subgraph endpoint used for prices and pool routing",
    )
    bnb_price_url: str = Field(
        default="https://min-api.cryptocompare.com/data/pricemultifull",
        description="CryptoCompare endpoint used to price BNB bridge fees",
    )

    # Agents
    default_agent_id: str = Field(default="utility", description="Profile used for unknown agent ids")
    profiles_dir: Path = Field(default=BASE_DIR / "profiles", description="Directory of agent profile YAML files")
    extra_token_symbols: Dict[str, str] = Field(
        default_factory=dict,
        description="Additional symbol -> address entries merged into the token table",
    )

    @property
    def has_anthropic_key(self) -> bool:
        return bool(self.anthropic_api_key)

    @property
    def has_llm_key(self) -> bool:
        """Check if we have an API key for the configured LLM provider"""
        if self.llm_provider.lower() in ["anthropic", "claude"]:
            return self.has_anthropic_key
        return False


# Global settings instance
settings = Settings()
