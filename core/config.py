"""Configuration models and loading."""

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

CONFIG_DIR = Path.home() / ".config" / "sfdc-ajax-proxy"
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_ENDPOINT = "https://login.salesforce.com/services/oauth2/token"


class ProxySettings(BaseModel):
    path: str = "/proxy"
    debug: bool = False


class CorsSettings(BaseModel):
    enabled: bool = False
    allowed_origin: str = "*"


class UpstreamSettings(BaseModel):
    default_endpoint: str = DEFAULT_ENDPOINT
    timeout: float = 300.0
    max_redirects: int = 10
    max_connections: int = 100
    max_keepalive_connections: int = 20


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)


def load_config(config_file: Path = CONFIG_FILE) -> Config:
    """Load configuration from JSON file, creating default if needed."""
    if not config_file.exists():
        config_file.parent.mkdir(parents=True, exist_ok=True)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(config_file.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = config_file.with_suffix(".json.bak")
        config_file.rename(backup)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default
