"""Configuration management."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from mathmatch.models.preferences import Preferences


class TimingConfig(BaseModel):
    """Engine delays in seconds."""

    mismatch_delay_seconds: float = Field(default=1.5, ge=0)
    win_delay_seconds: float = Field(default=1.5, ge=0)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    show_faces: bool = False


class EventLogConfig(BaseModel):
    """JSONL event log configuration."""

    enabled: bool = False
    output_path: str = "events.jsonl"


class Config(BaseModel):
    """Root configuration."""

    timing: TimingConfig = TimingConfig()
    defaults: Preferences = Preferences()
    logging: LoggingConfig = LoggingConfig()
    event_log: EventLogConfig = EventLogConfig()


def load_config(path: Path | str | None = None) -> Config:
    """Load configuration from YAML file.

    Args:
        path: Path to config file. If None, uses default config.

    Returns:
        Config object.
    """
    if path is None:
        return Config()

    config_path = Path(path)
    if not config_path.exists():
        return Config()

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    return Config(**data) if data else Config()
