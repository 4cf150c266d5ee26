"""Runtime settings for the ingestion service."""

from pathlib import Path
from typing import Any, Dict, Literal, Optional

import structlog
import yaml
from pydantic import BaseModel, Field

from dropwatch_common import ConfigurationError, constants, get_env, get_env_bool

logger = structlog.get_logger()

DEFAULT_FEED_CONFIG = Path(__file__).parent / "feed.yaml"


class IngestionSettings(BaseModel):
    """Knobs for one ingestion run, read from the environment."""

    database_url: str = Field(constants.DEFAULT_DATABASE_URL)
    min_score: int = Field(constants.DEFAULT_MIN_SCORE, ge=0, le=100)
    max_candidates: int = Field(constants.DEFAULT_MAX_CANDIDATES, ge=1)
    enable_validation: bool = True
    request_delay_seconds: float = Field(constants.DEFAULT_REQUEST_DELAY_SECONDS, ge=0)
    whois_retry_attempts: int = Field(constants.DEFAULT_WHOIS_RETRY_ATTEMPTS, ge=1)
    whois_retry_delay_seconds: float = Field(constants.DEFAULT_WHOIS_RETRY_DELAY_SECONDS, ge=0)
    whois_cooldown_after: int = Field(constants.DEFAULT_WHOIS_COOLDOWN_AFTER, ge=1)
    whois_cooldown_seconds: float = Field(constants.DEFAULT_WHOIS_COOLDOWN_SECONDS, ge=0)
    signal_order: Literal["whois_first", "scrape_first"] = "whois_first"
    enable_registrar_check: bool = False
    accept_missing_expiry: bool = True
    trust_dns_on_whois_failure: bool = True
    allow_synthetic_feed: bool = False
    sweep_after_ingest: bool = True
    dns_resolver_url: str = constants.DEFAULT_DOH_URL
    dns_timeout_seconds: float = Field(constants.DEFAULT_DNS_TIMEOUT, gt=0)
    http_timeout: int = Field(constants.DEFAULT_HTTP_TIMEOUT, gt=0)
    http_retries: int = Field(constants.DEFAULT_HTTP_RETRIES, ge=1)
    http_backoff: float = Field(constants.DEFAULT_HTTP_BACKOFF, ge=0)
    cache_ttl_seconds: int = Field(constants.DEFAULT_CACHE_TTL_SECONDS, ge=0)
    pushgateway_url: Optional[str] = None

    @classmethod
    def from_env(cls, **overrides: Any) -> "IngestionSettings":
        """
        Build settings from environment variables.

        Args:
            overrides: Values that win over the environment (CLI flags)

        Raises:
            ConfigurationError: If a variable cannot be converted
        """
        try:
            values: Dict[str, Any] = {
                "database_url": get_env("DATABASE_URL", constants.DEFAULT_DATABASE_URL),
                "min_score": int(get_env("MIN_SCORE", str(constants.DEFAULT_MIN_SCORE))),
                "max_candidates": int(
                    get_env("MAX_CANDIDATES", str(constants.DEFAULT_MAX_CANDIDATES))
                ),
                "enable_validation": get_env_bool("ENABLE_VALIDATION", True),
                "request_delay_seconds": float(
                    get_env(
                        "REQUEST_DELAY_SECONDS", str(constants.DEFAULT_REQUEST_DELAY_SECONDS)
                    )
                ),
                "whois_retry_attempts": int(
                    get_env("WHOIS_RETRY_ATTEMPTS", str(constants.DEFAULT_WHOIS_RETRY_ATTEMPTS))
                ),
                "whois_retry_delay_seconds": float(
                    get_env(
                        "WHOIS_RETRY_DELAY_SECONDS",
                        str(constants.DEFAULT_WHOIS_RETRY_DELAY_SECONDS),
                    )
                ),
                "whois_cooldown_after": int(
                    get_env(
                        "WHOIS_FAILURE_COOLDOWN_AFTER", str(constants.DEFAULT_WHOIS_COOLDOWN_AFTER)
                    )
                ),
                "whois_cooldown_seconds": float(
                    get_env(
                        "WHOIS_FAILURE_COOLDOWN_SECONDS",
                        str(constants.DEFAULT_WHOIS_COOLDOWN_SECONDS),
                    )
                ),
                "signal_order": get_env("SIGNAL_ORDER", "whois_first"),
                "enable_registrar_check": get_env_bool("ENABLE_REGISTRAR_CHECK", False),
                "accept_missing_expiry": get_env_bool("ACCEPT_MISSING_EXPIRY", True),
                "trust_dns_on_whois_failure": get_env_bool("TRUST_DNS_ON_WHOIS_FAILURE", True),
                "allow_synthetic_feed": get_env_bool("FEED_ALLOW_SYNTHETIC", False),
                "sweep_after_ingest": get_env_bool("SWEEP_AFTER_INGEST", True),
                "dns_resolver_url": get_env("DNS_RESOLVER_URL", constants.DEFAULT_DOH_URL),
                "dns_timeout_seconds": float(
                    get_env("DNS_TIMEOUT_SECONDS", str(constants.DEFAULT_DNS_TIMEOUT))
                ),
                "http_timeout": int(get_env("HTTP_TIMEOUT", str(constants.DEFAULT_HTTP_TIMEOUT))),
                "http_retries": int(get_env("HTTP_RETRIES", str(constants.DEFAULT_HTTP_RETRIES))),
                "http_backoff": float(get_env("HTTP_BACKOFF", str(constants.DEFAULT_HTTP_BACKOFF))),
                "cache_ttl_seconds": int(
                    get_env("CACHE_TTL_SECONDS", str(constants.DEFAULT_CACHE_TTL_SECONDS))
                ),
                "pushgateway_url": get_env("PROMETHEUS_PUSHGATEWAY_URL") or None,
            }
            values.update(
                {key: value for key, value in overrides.items() if value is not None}
            )
            return cls(**values)
        except ValueError as e:
            raise ConfigurationError(
                "Invalid ingestion settings", original_error=e
            ) from e


class FeedConfig(BaseModel):
    """Upstream feed endpoints and credentials."""

    name: str = "dropcatch"
    auth_url: str = constants.DROPCATCH_AUTH_URL
    download_url: str = constants.DROPCATCH_DOWNLOAD_URL
    file_type: str = constants.DROPCATCH_FILE_TYPE
    client_id: str = ""
    client_secret: str = ""
    registrar_search_url: str = constants.DEFAULT_REGISTRAR_SEARCH_URL


def load_feed_config(config_path: Optional[str] = None) -> FeedConfig:
    """
    Load feed endpoints from YAML; credentials always come from the environment.

    Args:
        config_path: YAML file (defaults to the packaged feed.yaml)

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    config_file = Path(config_path) if config_path else DEFAULT_FEED_CONFIG

    if not config_file.exists():
        raise ConfigurationError(
            "Configuration file not found", context={"config_path": str(config_file)}
        )

    logger.info("Loading feed configuration", config_path=str(config_file))

    try:
        with open(config_file, "r") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            "Invalid feed configuration",
            context={"config_path": str(config_file)},
            original_error=e,
        ) from e

    feed = config.get("feed", {})
    if not isinstance(feed, dict):
        raise ConfigurationError(
            "'feed' must be a mapping", context={"config_path": str(config_file), "field": "feed"}
        )

    feed_config = FeedConfig(
        **{
            **feed,
            "client_id": get_env("DROPCATCH_CLIENT_ID"),
            "client_secret": get_env("DROPCATCH_CLIENT_SECRET"),
        }
    )

    logger.info(
        "Feed configuration loaded",
        feed=feed_config.name,
        download_url=feed_config.download_url,
        credentials_present=bool(feed_config.client_id and feed_config.client_secret),
    )

    return feed_config
