"""Configuration management for Pipeline Healer."""

from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file at import time
load_dotenv()


class SelfHealingOptions(BaseModel):
    """Self-healing behavior configuration."""

    platform: str = "github"
    auto_retry: bool = True
    max_retries: int = Field(default=3, ge=0)
    retry_delay_seconds: float = Field(default=60, ge=0)
    auto_fix: bool = False
    notify_on_failure: bool = True
    collect_logs: bool = True
    fix_timeout_seconds: float = Field(default=300, gt=0)


class LangfuseConfig(BaseModel):
    """Langfuse observability configuration."""

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    host: str | None = None


class Config(BaseSettings):
    """Main configuration for Pipeline Healer."""

    model_config = SettingsConfigDict(
        env_prefix="PIPELINE_HEALER_",
        env_nested_delimiter="__",
    )

    # Core settings
    history_dir: Path = Path.home() / ".pipeline_healer" / "logs" / "self-healing"

    # Sub-configurations
    healing: SelfHealingOptions = Field(default_factory=SelfHealingOptions)
    langfuse: LangfuseConfig = Field(default_factory=LangfuseConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment wins over values passed in from the YAML file
        return env_settings, init_settings, dotenv_settings, file_secret_settings


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from YAML file and environment variables."""
    config_data: dict = {}

    # Try to find config file
    if config_path is None:
        for name in ["pipeline_healer.yaml", "pipeline_healer.yml", ".pipeline_healer.yaml"]:
            if Path(name).exists():
                config_path = Path(name)
                break

    # Load from YAML if exists
    if config_path and config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if raw and "pipeline_healer" in raw:
                config_data = raw["pipeline_healer"]
            elif raw:
                config_data = raw

    # Environment variables override YAML
    return Config(**config_data)
