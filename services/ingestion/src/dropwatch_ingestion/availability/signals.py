"""Shared types for availability signal checkers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List


class SignalOutcome(str, Enum):
    """What one signal says about a domain being about to drop."""

    POSITIVE = "positive"  # about to drop / free
    NEGATIVE = "negative"  # registered, renewed or outside the drop window
    UNKNOWN = "unknown"  # inconclusive; ask the next signal


class Verdict(str, Enum):
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class SignalResult:
    signal: str
    outcome: SignalOutcome
    reason: str


@dataclass
class ValidationContext:
    """
    Observations shared between checkers while validating one domain.

    dns_clear is set by the DNS checker when the lookup succeeded and found
    no records; whois_failed is set when WHOIS could not be queried at all.
    """

    domain: str
    now: datetime
    dns_clear: bool = False
    whois_failed: bool = False
    signals: List[SignalResult] = field(default_factory=list)


@dataclass
class ValidationResult:
    domain: str
    verdict: Verdict
    reason: str
    signals: List[SignalResult] = field(default_factory=list)
    whois_failed: bool = False

    @property
    def confirmed(self) -> bool:
        return self.verdict is Verdict.CONFIRMED


class SignalChecker(ABC):
    """One independent source of evidence about a domain's availability."""

    name: str = "signal"

    @abstractmethod
    async def check(self, domain: str, context: ValidationContext) -> SignalResult:
        """
        Inspect a domain and report a tri-state outcome.

        Checkers must not raise for upstream trouble; network failures and
        blocked requests are reported as SignalOutcome.UNKNOWN.
        """
        pass

    def result(self, outcome: SignalOutcome, reason: str) -> SignalResult:
        return SignalResult(signal=self.name, outcome=outcome, reason=reason)
