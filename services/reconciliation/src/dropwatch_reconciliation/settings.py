"""Runtime settings for the reconciliation sweep."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator

from dropwatch_common import ConfigurationError, constants, get_env, get_env_bool


class ReconciliationSettings(BaseModel):
    """Knobs for one sweep, read from the environment."""

    database_url: str = Field(constants.DEFAULT_DATABASE_URL)
    prune_out_of_window: bool = True
    window_min_days: int = Field(constants.DEFAULT_WINDOW_MIN_DAYS)
    window_max_days: int = Field(constants.DEFAULT_WINDOW_MAX_DAYS)
    dropped_retention_days: int = Field(constants.DROPPED_RETENTION_DAYS, ge=0)
    pushgateway_url: Optional[str] = None

    @model_validator(mode="after")
    def check_window(self) -> "ReconciliationSettings":
        if self.window_min_days > self.window_max_days:
            raise ValueError("window_min_days must not exceed window_max_days")
        return self

    @classmethod
    def from_env(cls, **overrides: Any) -> "ReconciliationSettings":
        """
        Build settings from environment variables.

        Raises:
            ConfigurationError: If a variable cannot be converted
        """
        try:
            values: Dict[str, Any] = {
                "database_url": get_env("DATABASE_URL", constants.DEFAULT_DATABASE_URL),
                "prune_out_of_window": get_env_bool("PRUNE_OUT_OF_WINDOW", True),
                "window_min_days": int(
                    get_env("DROP_WINDOW_MIN_DAYS", str(constants.DEFAULT_WINDOW_MIN_DAYS))
                ),
                "window_max_days": int(
                    get_env("DROP_WINDOW_MAX_DAYS", str(constants.DEFAULT_WINDOW_MAX_DAYS))
                ),
                "dropped_retention_days": int(
                    get_env("DROPPED_RETENTION_DAYS", str(constants.DROPPED_RETENTION_DAYS))
                ),
                "pushgateway_url": get_env("PROMETHEUS_PUSHGATEWAY_URL") or None,
            }
            values.update({key: value for key, value in overrides.items() if value is not None})
            return cls(**values)
        except ValueError as e:
            raise ConfigurationError("Invalid reconciliation settings", original_error=e) from e
