"""Uniform view over loosely shaped WHOIS payloads."""

import re
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional

from dropwatch_common import constants, days_since, parse_date

# Keys registries and WHOIS libraries use for the same facts, most common first
EXPIRY_FIELDS = (
    "expiration_date",
    "expirationDate",
    "expiresDate",
    "registryExpiryDate",
    "Registry Expiry Date",
    "Expiry Date",
    "Expiration Date",
    "paid_till",
    "paid-till",
    "expires",
    "expiry",
    "domain_expiration_date",
    "Domain Expiration Date",
    "expiration",
    "expire_date",
    "expire-date",
    "expiry_date",
    "expiry-date",
    "free-date",
    "renewal_date",
    "renewal-date",
)
CREATION_FIELDS = ("creation_date", "creationDate", "createdDate", "created", "Creation Date")
STATUS_FIELDS = ("status", "domainStatus", "domain_status", "Domain Status")
REGISTRAR_FIELDS = ("registrar", "Registrar Name", "sponsoringRegistrar")

ACTIVE_STATUS_TOKENS = {"ok", "active", "client", "server", "registered"}
_STATUS_SPLIT = re.compile(r"\s+")


def _flatten(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        items: List[str] = []
        for item in value:
            items.extend(_flatten(item))
        return items
    text = str(value).strip()
    return [text] if text else []


class WhoisRecord:
    """
    Field-family accessors over a raw WHOIS mapping.

    Each logical field (expiry, creation, status, registrar) is looked up
    through its list of known aliases; list values use the first element.
    """

    def __init__(self, raw: Optional[Mapping[str, Any]]):
        self.raw = {key: value for key, value in (raw or {}).items() if value not in (None, "", [])}

    def _first(self, fields: Iterable[str]) -> Any:
        for key in fields:
            if key in self.raw:
                return self.raw[key]
        return None

    @property
    def is_empty(self) -> bool:
        return not self.raw

    @property
    def expiry(self) -> Optional[datetime]:
        for key in EXPIRY_FIELDS:
            parsed = parse_date(self.raw.get(key))
            if parsed is not None:
                return parsed
        return None

    @property
    def creation(self) -> Optional[datetime]:
        for key in CREATION_FIELDS:
            parsed = parse_date(self.raw.get(key))
            if parsed is not None:
                return parsed
        return None

    @property
    def statuses(self) -> List[str]:
        values: List[str] = []
        for key in STATUS_FIELDS:
            values.extend(_flatten(self.raw.get(key)))
        return values

    @property
    def registrar(self) -> Optional[str]:
        values = _flatten(self._first(REGISTRAR_FIELDS))
        return values[0] if values else None

    def has_active_status(self) -> bool:
        """True if any status carries a standalone ok/active/client/server/registered token."""
        tokens = set()
        for status in self.statuses:
            tokens.update(_STATUS_SPLIT.split(status.lower()))
        return bool(tokens & ACTIVE_STATUS_TOKENS)

    def registration_evidence(self, now: datetime) -> Optional[str]:
        """
        Reason the record clearly describes a live registration, or None.

        Any one of: an active status token, a creation date within the last
        30 days, or a named registrar.
        """
        if self.has_active_status():
            return "Active registration status"

        created = self.creation
        if created is not None and days_since(created, now) <= constants.RECENT_CREATION_DAYS:
            return "Recently created"

        registrar = self.registrar
        if registrar and registrar != "-":
            return f"Registrar on record ({registrar})"

        return None
