"""Custom Airflow operators package."""

from custom_operators import (
    CommandOperator,
    DropIngestionOperator,
    ReconciliationOperator,
)

__all__ = [
    "CommandOperator",
    "DropIngestionOperator",
    "ReconciliationOperator",
]
