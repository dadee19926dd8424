"""Configuration management for the marketplace core."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class DatabaseConfig(BaseModel):
    """Database configuration."""

    url: str = "sqlite:///data/db/marketplace.db"
    echo: bool = False


class ScoringConfig(BaseModel):
    """Scoring configuration."""

    # Integration bonus for categories with strong integration ecosystems
    category_bonuses: Dict[str, int] = Field(
        default_factory=lambda: {"devtools": 10, "hr": 5}
    )
    batch_size: int = 50


class CompetitorConfig(BaseModel):
    """Competitive analysis configuration."""

    max_competitors: int = 5
    premium_threshold: float = 1.2
    budget_threshold: float = 0.8


class PricingConfig(BaseModel):
    """Quote and bundle pricing configuration."""

    quote_validity_days: int = 30
    quote_response_days: int = 3


class CacheConfig(BaseModel):
    """Read-through cache configuration."""

    default_ttl_seconds: int = 300
    catalog_ttl_seconds: int = 900


class ScheduleConfig(BaseModel):
    """Scheduling configuration."""

    scoring_hours: int = 2
    competitor_hours: int = 12
    quote_expiry_minutes: int = 30
    cache_cleanup_minutes: int = 10
    max_instances_per_job: int = 1
    misfire_grace_time_seconds: int = 300


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "text"
    file: str = "data/logs/marketplace.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    compression: Optional[str] = "zip"
    modules: Dict[str, str] = Field(default_factory=dict)


class Config(BaseModel):
    """Main configuration model."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    competitors: CompetitorConfig = Field(default_factory=CompetitorConfig)
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class Settings(BaseSettings):
    """Environment-based settings."""

    # Database
    database_url: str = ""

    # Logging
    log_level: str = ""
    log_file: str = ""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


class ConfigManager:
    """Configuration manager for loading and merging config sources."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to YAML configuration file
        """
        load_dotenv()

        if config_path is None:
            config_path = Path(__file__).parent.parent.parent / "config" / "config.yaml"

        self.config_path = Path(config_path)
        self.yaml_config = self._load_yaml()

        self.env_settings = Settings()

        self.config = self._merge_config()

    def _load_yaml(self) -> Dict[str, Any]:
        """Load YAML configuration file."""
        if not self.config_path.exists():
            return {}

        with open(self.config_path, "r") as f:
            return yaml.safe_load(f) or {}

    def _merge_config(self) -> Config:
        """Merge YAML config with environment variables."""
        merged = self.yaml_config.copy()

        # Environment wins over YAML where set
        if self.env_settings.database_url:
            merged.setdefault("database", {})["url"] = self.env_settings.database_url

        if self.env_settings.log_level:
            merged.setdefault("logging", {})["level"] = self.env_settings.log_level

        if self.env_settings.log_file:
            merged.setdefault("logging", {})["file"] = self.env_settings.log_file

        return Config(**merged)


# Global config instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> Config:
    """Get global configuration instance."""
    return get_config_manager().config
