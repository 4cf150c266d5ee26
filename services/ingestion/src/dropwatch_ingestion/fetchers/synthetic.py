"""Built-in development dataset used when the real feed is unreachable."""

from datetime import datetime, timedelta
from typing import List

import structlog

from dropwatch_common import constants, to_utc_date
from dropwatch_schemas import CandidateDomain

logger = structlog.get_logger()

SYNTHETIC_SOURCE = "synthetic"

SYNTHETIC_TLDS = ("com", "io", "ai", "app", "dev", "co")
SYNTHETIC_PREFIXES = (
    "techstart", "aitools", "devops", "cloudapp", "dataflow", "apihub",
    "payfast", "shopnow", "gamehub", "fitness", "medcare", "edulearn",
    "cryptopay", "nftmarket", "webapp", "saaskit", "codebase", "apigate",
    "smartai", "quickpay", "dealfinder", "healthtrak", "learnfast", "datastream",
)


class SyntheticFeed:
    """
    Deterministic stand-in for the drop feed.

    Every candidate carries the "Mock Registrar Inc." registrar and
    is_synthetic=True so it can never pass for real feed data.
    """

    def __init__(self, size: int = 50):
        self.size = size

    def candidates(self, now: datetime) -> List[CandidateDomain]:
        today = to_utc_date(now)
        generated = []

        for i in range(self.size):
            prefix = SYNTHETIC_PREFIXES[i % len(SYNTHETIC_PREFIXES)]
            suffix = str(i // len(SYNTHETIC_PREFIXES)) if i >= len(SYNTHETIC_PREFIXES) else ""
            tld = SYNTHETIC_TLDS[i % len(SYNTHETIC_TLDS)]
            # Spread drops across the next ten days
            drop = today + timedelta(days=i % 11)

            generated.append(
                CandidateDomain.from_drop_date(
                    f"{prefix}{suffix}.{tld}",
                    drop,
                    registrar=constants.SYNTHETIC_REGISTRAR,
                    source=SYNTHETIC_SOURCE,
                    is_synthetic=True,
                )
            )

        logger.warning("Generated synthetic drop candidates", count=len(generated))
        return generated
