"""Back-off bookkeeping for consecutive WHOIS failures."""

from dataclasses import dataclass

import structlog

logger = structlog.get_logger()


@dataclass
class FailureCooldown:
    """
    Counts consecutive WHOIS failures.

    Every threshold-th consecutive failure asks the caller to pause for
    cooldown_seconds; any non-failing validation resets the streak.
    """

    threshold: int
    cooldown_seconds: float
    consecutive_failures: int = 0
    cooldowns_triggered: int = 0

    def record(self, whois_failed: bool) -> bool:
        """Update the streak and return True when a cooldown is due."""
        if not whois_failed:
            self.consecutive_failures = 0
            return False

        self.consecutive_failures += 1
        if self.consecutive_failures % self.threshold == 0:
            self.cooldowns_triggered += 1
            logger.warning(
                "WHOIS failure streak, cooling down",
                consecutive_failures=self.consecutive_failures,
                cooldown_seconds=self.cooldown_seconds,
            )
            return True
        return False
