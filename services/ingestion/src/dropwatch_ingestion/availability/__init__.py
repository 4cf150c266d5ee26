"""Availability signals and the validation cascade."""

from dropwatch_ingestion.availability.signals import (
    SignalChecker,
    SignalOutcome,
    SignalResult,
    ValidationContext,
    ValidationResult,
    Verdict,
)
from dropwatch_ingestion.availability.dns_checker import DnsChecker
from dropwatch_ingestion.availability.whois_record import WhoisRecord
from dropwatch_ingestion.availability.whois_checker import (
    WhoisChecker,
    python_whois_lookup,
    is_transient_whois_error,
)
from dropwatch_ingestion.availability.registrar_checker import (
    RegistrarSearchChecker,
    classify_search_page,
)
from dropwatch_ingestion.availability.cooldown import FailureCooldown
from dropwatch_ingestion.availability.availability_validator import (
    AvailabilityValidator,
    build_validator,
)

__all__ = [
    "SignalChecker",
    "SignalOutcome",
    "SignalResult",
    "ValidationContext",
    "ValidationResult",
    "Verdict",
    "DnsChecker",
    "WhoisRecord",
    "WhoisChecker",
    "python_whois_lookup",
    "is_transient_whois_error",
    "RegistrarSearchChecker",
    "classify_search_page",
    "FailureCooldown",
    "AvailabilityValidator",
    "build_validator",
]
