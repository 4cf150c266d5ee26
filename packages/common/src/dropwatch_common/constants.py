"""Configuration constants for the drop pipeline."""

from typing import Final

# Registry lifecycle (days after expiry)
DROP_HOLD_DAYS: Final[int] = 75
GRACE_PERIOD_END_DAY: Final[int] = 30
REDEMPTION_PERIOD_END_DAY: Final[int] = 60
PENDING_DELETE_END_DAY: Final[int] = 75

# WHOIS expiry window that counts as "about to drop"
DROP_WINDOW_MIN_DAYS_SINCE_EXPIRY: Final[int] = 60
DROP_WINDOW_MAX_DAYS_SINCE_EXPIRY: Final[int] = 80
RECENT_CREATION_DAYS: Final[int] = 30

# Quality gate
DEFAULT_MIN_SCORE: Final[int] = 30
DEFAULT_MAX_CANDIDATES: Final[int] = 300
HOT_DOMAIN_SCORE: Final[int] = 70

# HTTP Fetcher Defaults
DEFAULT_HTTP_TIMEOUT: Final[int] = 30
DEFAULT_HTTP_RETRIES: Final[int] = 3
DEFAULT_HTTP_BACKOFF: Final[float] = 5.0
DEFAULT_DNS_TIMEOUT: Final[float] = 5.0
DEFAULT_REGISTRAR_TIMEOUT: Final[float] = 10.0
BROWSER_USER_AGENT: Final[str] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# DropCatch feed
DROPCATCH_AUTH_URL: Final[str] = "https://api.dropcatch.com/authorize"
DROPCATCH_DOWNLOAD_URL: Final[str] = (
    "https://api.dropcatch.com/v2/downloads/dropping/DaysOut0"
)
DROPCATCH_FILE_TYPE: Final[str] = "Csv"
SYNTHETIC_REGISTRAR: Final[str] = "Mock Registrar Inc."
UNKNOWN_REGISTRAR: Final[str] = "Unknown"

# Availability signals
DEFAULT_DOH_URL: Final[str] = "https://dns.google/resolve"
DEFAULT_REGISTRAR_SEARCH_URL: Final[str] = (
    "https://www.namecheap.com/domains/registration/results/?domain={domain}"
)
DEFAULT_CACHE_TTL_SECONDS: Final[int] = 3600

# WHOIS pacing
DEFAULT_REQUEST_DELAY_SECONDS: Final[float] = 2.0
DEFAULT_WHOIS_RETRY_ATTEMPTS: Final[int] = 2
DEFAULT_WHOIS_RETRY_DELAY_SECONDS: Final[float] = 1.5
DEFAULT_WHOIS_COOLDOWN_AFTER: Final[int] = 10
DEFAULT_WHOIS_COOLDOWN_SECONDS: Final[float] = 12.0

# Store reconciliation
DROPPED_RETENTION_DAYS: Final[int] = 30
DEFAULT_WINDOW_MIN_DAYS: Final[int] = 0
DEFAULT_WINDOW_MAX_DAYS: Final[int] = 10
WEEK_WINDOW_DAYS: Final[int] = 7

# Read API
DEFAULT_PAGE_SIZE: Final[int] = 50
MAX_PAGE_SIZE: Final[int] = 100

# Domain Validation
MAX_DOMAIN_LENGTH: Final[int] = 253
MIN_DOMAIN_LENGTH: Final[int] = 4
MAX_LABEL_LENGTH: Final[int] = 63

# Service Defaults
DEFAULT_LOG_LEVEL: Final[str] = "INFO"
DEFAULT_DATABASE_URL: Final[str] = "sqlite:///dropwatch.db"
