"""Store reconciliation service."""

from dropwatch_reconciliation.settings import ReconciliationSettings
from dropwatch_reconciliation.sweep import LifecycleSweep, SweepReport

__all__ = ["ReconciliationSettings", "LifecycleSweep", "SweepReport"]
