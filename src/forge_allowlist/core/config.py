"""
Forge Allowlist - Configuration
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from forge_allowlist.crypto.hashing import HashAlgorithm
from forge_allowlist.crypto.merkle import OddLayerPolicy, TreeOptions


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Forge Allowlist"
    VERSION: str = "1.0.0"
    ENV: str = "development"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8083
    WORKERS: int = 1
    LOG_LEVEL: str = "INFO"

    # Merkle tree
    HASH_ALGORITHM: HashAlgorithm = HashAlgorithm.KECCAK256
    ODD_LAYER_POLICY: OddLayerPolicy = OddLayerPolicy.REJECT
    SORT_LEAVES: bool = True
    DEDUPLICATE_ADDRESSES: bool = False
    MAX_ALLOWLIST_SIZE: int = Field(default=100_000, gt=0)

    # Metrics
    METRICS_ENABLED: bool = True

    @property
    def tree_options(self) -> TreeOptions:
        return TreeOptions(
            algorithm=self.HASH_ALGORITHM,
            odd_layer_policy=self.ODD_LAYER_POLICY,
            sort_leaves=self.SORT_LEAVES,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
