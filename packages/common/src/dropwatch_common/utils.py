"""Utility functions."""

import os
from typing import Optional
import structlog

from dropwatch_common.exceptions import ConfigurationError

logger = structlog.get_logger()

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def get_env(key: str, default: Optional[str] = None, required: bool = False) -> str:
    """
    Get environment variable with optional default and required flag.

    Args:
        key: Environment variable name
        default: Default value if not found
        required: If True, raise error if not found and no default

    Returns:
        Environment variable value

    Raises:
        ValueError: If required=True and variable not found
    """
    value = os.getenv(key, default)

    if required and value is None:
        raise ValueError(f"Required environment variable '{key}' not found")

    return value or ""


def get_env_bool(key: str, default: bool) -> bool:
    """
    Read a boolean flag such as ENABLE_VALIDATION=false.

    Raises:
        ConfigurationError: If the value is not a recognised boolean
    """
    raw = get_env(key, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"Invalid boolean value for {key}",
        context={"field": key, "value": raw},
    )


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into the closed range [lower, upper]."""
    return max(lower, min(upper, value))
