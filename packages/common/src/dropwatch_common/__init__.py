"""Common utilities package."""

from dropwatch_common.logging import setup_logging, bind_run_context
from dropwatch_common.exceptions import (
    PipelineException,
    FetchError,
    AuthenticationError,
    ParseError,
    FeedArchiveError,
    WhoisLookupError,
    StoreError,
    ConfigurationError,
)
from dropwatch_common.utils import get_env, get_env_bool, clamp
from dropwatch_common.cache import TTLCache
from dropwatch_common.lifecycle import (
    DomainStatus,
    utc_now,
    to_utc_date,
    drop_date_from_expiry,
    expiry_date_from_drop,
    days_until_drop,
    days_since,
    lifecycle_status,
    parse_date,
)
from dropwatch_common import constants

__all__ = [
    "setup_logging",
    "bind_run_context",
    "PipelineException",
    "FetchError",
    "AuthenticationError",
    "ParseError",
    "FeedArchiveError",
    "WhoisLookupError",
    "StoreError",
    "ConfigurationError",
    "get_env",
    "get_env_bool",
    "clamp",
    "TTLCache",
    "DomainStatus",
    "utc_now",
    "to_utc_date",
    "drop_date_from_expiry",
    "expiry_date_from_drop",
    "days_until_drop",
    "days_since",
    "lifecycle_status",
    "parse_date",
    "constants",
]
