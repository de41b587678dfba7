"""
Loads and handles config from config.yml
Server overrides (HOST, PORT, LOG_LEVEL) are read from the environment / .env
"""
import logging
import os
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class HttpConfig(BaseModel):
    """Outbound request settings shared by every extractor."""
    timeout: float = Field(10.0, gt=0)
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = "en-US,en;q=0.9"

    def headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept-Language": self.accept_language,
        }


class SourceConfig(BaseModel):
    """Configuration for a single upstream source."""
    enabled: bool = True
    url: str
    max_rows: int = Field(10, ge=0)  # Rows inspected on the upstream page
    limit: Optional[int] = Field(None, ge=0)  # Truncation after filtering
    title_max_length: Optional[int] = Field(None, gt=0)  # For news


class SourcesConfig(BaseModel):
    releases: SourceConfig = SourceConfig(
        url="https://store.steampowered.com/search/?sort_by=Released_DESC&tags=492&category1=998&ndl=1",
        max_rows=60,
    )
    upcoming: SourceConfig = SourceConfig(
        url="https://store.steampowered.com/search/?filter=popularwishlist&tags=492&category1=998",
        max_rows=20,
        limit=12,
    )
    news: SourceConfig = SourceConfig(
        url=(
            "https://news.google.com/rss/search?q=indie+game+viral+OR+trending+OR+%22new+indie%22"
            "&hl=en-US&gl=US&ceid=US:en"
        ),
        max_rows=10,
        title_max_length=80,
    )
    itch: SourceConfig = SourceConfig(
        url="https://itch.io/games/new-and-popular",
        max_rows=10,
    )


class CacheConfig(BaseModel):
    ttl_seconds: float = Field(300, gt=0)
    single_flight: bool = True


class RateLimitConfig(BaseModel):
    max_requests: int = Field(10, ge=1)
    window_seconds: float = Field(60, gt=0)
    sweep_interval_seconds: float = Field(60, gt=0)


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"


class Config(BaseModel):
    http: HttpConfig = HttpConfig()
    sources: SourcesConfig = SourcesConfig()
    cache: CacheConfig = CacheConfig()
    rate_limit: RateLimitConfig = RateLimitConfig()
    server: ServerConfig = ServerConfig()


def _bool(value: str | bool) -> bool:
    """Convert string or bool to boolean."""
    if isinstance(value, bool):
        return value
    return str(value).lower() in ("1", "true", "yes", "on")


def _get_config_path() -> Optional[str]:
    """Get the path to config.yml, handling different working directories."""
    env_path = os.getenv("INDIE_RADAR_CONFIG")
    if env_path:
        if not os.path.exists(env_path):
            raise FileNotFoundError(f"INDIE_RADAR_CONFIG points to a missing file: {env_path}")
        return env_path

    # Try relative path first
    if os.path.exists('resources/config.yml'):
        return 'resources/config.yml'

    # Try from project root
    project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    config_path = os.path.join(project_root, 'resources', 'config.yml')
    if os.path.exists(config_path):
        return config_path

    return None


def _parse_server_config(data: Dict[str, Any]) -> ServerConfig:
    """Merge YAML server settings with environment overrides."""
    return ServerConfig(
        host=os.getenv("HOST", data.get("host", "0.0.0.0")),
        port=int(os.getenv("PORT", data.get("port", 5000))),
        log_level=os.getenv("LOG_LEVEL", data.get("log_level", "INFO")).upper(),
    )


def parse_config(data: Dict[str, Any]) -> Config:
    """Build a Config from already-loaded YAML data."""
    data = data or {}

    sources = SourcesConfig()
    for name, overrides in (data.get("sources") or {}).items():
        if not hasattr(sources, name):
            logger.warning(f"Ignoring unknown source in config: {name}")
            continue
        current = getattr(sources, name)
        overrides = dict(overrides or {})
        if "enabled" in overrides:
            overrides["enabled"] = _bool(overrides["enabled"])
        setattr(sources, name, SourceConfig(**{**current.model_dump(), **overrides}))

    cache_data = dict(data.get("cache") or {})
    if "single_flight" in cache_data:
        cache_data["single_flight"] = _bool(cache_data["single_flight"])

    return Config(
        http=HttpConfig(**(data.get("http") or {})),
        sources=sources,
        cache=CacheConfig(**cache_data),
        rate_limit=RateLimitConfig(**(data.get("rate_limit") or {})),
        server=_parse_server_config(data.get("server") or {}),
    )


def load_config(path: Optional[str] = None) -> Config:
    """Load configuration from config.yml and server overrides from .env."""
    load_dotenv()

    config_path = path or _get_config_path()
    if config_path is None:
        logger.warning("No resources/config.yml found, using built-in defaults")
        return parse_config({})

    with open(config_path, 'r') as file:
        config = yaml.safe_load(file)

    return parse_config(config or {})
