"""Configuration management utilities."""

from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pairline.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


class ServerConfig(BaseModel):
    """Signaling server configuration."""
    host: str = Field("0.0.0.0", description="Interface to bind")
    port: int = Field(5000, description="TCP port to listen on (0 picks a free port)")
    health_path: str = Field("/health", description="HTTP path answering health checks")
    ping_interval: Optional[float] = Field(20.0, description="Seconds between keepalive pings")
    ping_timeout: Optional[float] = Field(20.0, description="Seconds to wait for a pong before dropping the peer")
    max_message_size: int = Field(1 << 20, description="Largest accepted frame in bytes")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field("INFO", description="Log level")
    file: Optional[Path] = Field(None, description="Optional log file")
    rotation: str = Field("10 MB", description="Log rotation size")
    retention: str = Field("1 week", description="Log retention period")


class Config(BaseModel):
    """Main application configuration."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class Settings(BaseSettings):
    """Environment-based settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = Field("pairline", alias="APP_NAME")
    config_path: Optional[Path] = Field(None, alias="PAIRLINE_CONFIG")

    signaling_host: Optional[str] = Field(None, alias="SIGNALING_HOST")
    signaling_port: Optional[int] = Field(None, alias="PORT")

    log_level: Optional[str] = Field(None, alias="LOG_LEVEL")
    log_file: Optional[Path] = Field(None, alias="LOG_FILE")

    def apply(self, config: Config) -> Config:
        """Return a copy of ``config`` with environment overrides applied."""
        server = config.server.model_copy()
        log = config.logging.model_copy()
        if self.signaling_host is not None:
            server.host = self.signaling_host
        if self.signaling_port is not None:
            server.port = self.signaling_port
        if self.log_level is not None:
            log.level = self.log_level
        if self.log_file is not None:
            log.file = self.log_file
        return Config(server=server, logging=log)


def load_config(config_path: Optional[Union[Path, str]] = None) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file. Falls back to
            ``PAIRLINE_CONFIG`` and then to ``configs/default.yaml``.

    Returns:
        Configuration object
    """
    if config_path is None:
        config_path = settings.config_path or DEFAULT_CONFIG_PATH
    config_path = Path(config_path)

    if not config_path.exists():
        logger.warning(f"Config file not found: {config_path}, using default config")
        return Config()

    with open(config_path, "r") as f:
        config_dict = yaml.safe_load(f) or {}

    return Config(**config_dict)


def save_config(config: Config, output_path: Union[Path, str]) -> None:
    """Save configuration to YAML file.

    Args:
        config: Configuration object
        output_path: Output file path
    """
    config_dict = config.model_dump(mode="json")

    with open(output_path, "w") as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)


# Global settings instance
settings = Settings()
