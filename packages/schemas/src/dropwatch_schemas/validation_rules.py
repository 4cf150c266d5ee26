"""Domain name rules: validity, cleaning and slugs."""

import ipaddress
import re
from typing import Optional, Tuple

# Matches valid domain names (e.g., example.com, sub.example.co)
# - Labels must be 1-63 characters
# - Labels must start and end with alphanumeric
# - Labels can contain hyphens but not at start/end
# - TLD must be at least 2 characters and alphabetic
DOMAIN_PATTERN = re.compile(
    r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)(\.[A-Za-z0-9-]{1,63}(?<!-))*\.[A-Za-z]{2,}$"
)

# Reserved/private TLDs that never appear in a drop feed
RESERVED_TLDS = [
    "local",
    "localhost",
    "test",
    "example",
    "invalid",
    "onion",
]


def is_valid_domain(domain: str) -> bool:
    """
    Check if domain is a registrable-looking name.

    Examples:
        >>> is_valid_domain("getcloudhub.com")
        True
        >>> is_valid_domain("localhost")
        False
        >>> is_valid_domain("192.168.1.1")
        False
    """
    if not domain:
        return False

    domain = domain.strip().lower()

    if len(domain) < 4 or len(domain) > 253:
        return False

    try:
        ipaddress.ip_address(domain)
        return False
    except ValueError:
        pass

    if domain.split(".")[-1] in RESERVED_TLDS:
        return False

    return bool(DOMAIN_PATTERN.match(domain))


def clean_domain(domain: str) -> Optional[str]:
    """
    Clean and normalize a domain from a feed row.

    Strips whitespace, URL schemes, www prefixes, paths and trailing dots.

    Returns:
        Cleaned domain or None if invalid

    Examples:
        >>> clean_domain("  GetCloudHub.COM  ")
        'getcloudhub.com'
        >>> clean_domain("https://www.example.com/path")
        'example.com'
    """
    if not domain:
        return None

    domain = domain.strip().lower()

    for prefix in ["https://", "http://", "//"]:
        if domain.startswith(prefix):
            domain = domain[len(prefix) :]

    while domain.startswith("www."):
        domain = domain[4:]

    for delimiter in ["/", "?", "#"]:
        if delimiter in domain:
            domain = domain.split(delimiter)[0]

    domain = domain.rstrip(".").strip()

    if is_valid_domain(domain):
        return domain

    return None


def split_domain(domain: str) -> Tuple[str, str]:
    """
    Split a domain into (name, tld).

    The name is everything before the first dot and the TLD everything
    after it, so "shop.co.uk" gives ("shop", "co.uk").
    """
    name, _, tld = domain.lower().partition(".")
    return name, tld


def domain_to_slug(domain: str) -> str:
    """URL-safe identifier: dots become hyphens."""
    return domain.lower().replace(".", "-")


def domain_from_slug(slug: str) -> str:
    """
    Inverse of domain_to_slug for single-label TLDs.

    TLD labels never contain hyphens, so the last hyphen is the dot.
    """
    name, _, tld = slug.lower().rpartition("-")
    if not name:
        return tld
    return f"{name}.{tld}"
