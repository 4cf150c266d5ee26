"""Domain data models."""

from datetime import date, datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from dropwatch_common import (
    DomainStatus,
    constants,
    days_until_drop,
    expiry_date_from_drop,
    lifecycle_status,
    utc_now,
)
from dropwatch_schemas.score import QualityScore
from dropwatch_schemas.validation_rules import domain_to_slug, split_domain


def record_title(domain_name: str, days_left: int) -> str:
    """Display title used by listing pages."""
    return f"{domain_name} - Premium Domain Dropping in {days_left} Days"


class CandidateDomain(BaseModel):
    """A domain reported by an upstream feed as approaching release."""

    domain_name: str = Field(..., description="Lowercase FQDN (e.g., getcloudhub.com)")
    drop_date: date = Field(..., description="Date the registry releases the name")
    expiry_date: date = Field(..., description="Registration expiry (drop_date - 75 days)")
    registrar: str = Field(
        constants.UNKNOWN_REGISTRAR, description="Registrar reported by the feed"
    )
    source: str = Field("dropcatch", description="Feed the candidate came from")
    is_synthetic: bool = Field(
        False, description="True only for the built-in development dataset"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "domain_name": "getcloudhub.com",
                "drop_date": "2025-10-22",
                "expiry_date": "2025-08-08",
                "registrar": "GoDaddy.com, LLC",
                "source": "dropcatch",
                "is_synthetic": False,
            }
        }
    )

    @field_validator("domain_name")
    @classmethod
    def normalize_domain_name(cls, value: str) -> str:
        return value.strip().lower()

    @model_validator(mode="after")
    def check_hold_period(self) -> "CandidateDomain":
        if self.expiry_date != expiry_date_from_drop(self.drop_date):
            raise ValueError(
                f"expiry_date must be {constants.DROP_HOLD_DAYS} days before drop_date"
            )
        return self

    @classmethod
    def from_drop_date(
        cls,
        domain_name: str,
        drop_date: date,
        registrar: Optional[str] = None,
        source: str = "dropcatch",
        is_synthetic: bool = False,
    ) -> "CandidateDomain":
        return cls(
            domain_name=domain_name,
            drop_date=drop_date,
            expiry_date=expiry_date_from_drop(drop_date),
            registrar=registrar or constants.UNKNOWN_REGISTRAR,
            source=source,
            is_synthetic=is_synthetic,
        )

    @property
    def tld(self) -> str:
        return split_domain(self.domain_name)[1]


class DomainRecord(BaseModel):
    """Persisted view of a confirmed drop candidate."""

    domain_name: str = Field(..., description="Unique key")
    tld: str = Field(..., description="Everything after the first dot")
    expiry_date: date = Field(..., description="Registration expiry")
    drop_date: date = Field(..., description="Expected release date")
    days_until_drop: int = Field(..., description="Whole days until drop_date")
    status: DomainStatus = Field(..., description="Lifecycle status")
    registrar: str = Field(constants.UNKNOWN_REGISTRAR, description="Registrar name")
    popularity_score: int = Field(0, ge=0, le=100, description="Quality score total")
    category: str = Field("general", description="Keyword category")
    slug: str = Field(..., description="URL-safe identifier")
    title: str = Field(..., description="Display title")
    metadata: Dict[str, Any] = Field(
        default_factory=dict, description="Quality score breakdown and flags"
    )
    last_updated: datetime = Field(
        default_factory=utc_now, description="When the record was last written"
    )
    created_at: Optional[datetime] = Field(
        None, description="Set by the store on first insert"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "domain_name": "getcloudhub.com",
                "tld": "com",
                "expiry_date": "2025-08-08",
                "drop_date": "2025-10-22",
                "days_until_drop": 3,
                "status": "pending_delete",
                "registrar": "GoDaddy.com, LLC",
                "popularity_score": 85,
                "category": "tech",
                "slug": "getcloudhub-com",
                "title": "getcloudhub.com - Premium Domain Dropping in 3 Days",
                "metadata": {"nameQuality": 30, "reasoning": "Exceptional domain"},
                "last_updated": "2025-10-19T12:00:00Z",
            }
        },
    )

    @classmethod
    def from_candidate(
        cls,
        candidate: CandidateDomain,
        score: QualityScore,
        category: str,
        now: datetime,
    ) -> "DomainRecord":
        """
        Build the record for a confirmed candidate.

        Status and days remaining are derived from the dates, never copied
        from the feed.
        """
        days_left = days_until_drop(candidate.drop_date, now)
        metadata = score.as_metadata()
        if candidate.is_synthetic:
            metadata["synthetic"] = True

        return cls(
            domain_name=candidate.domain_name,
            tld=candidate.tld,
            expiry_date=candidate.expiry_date,
            drop_date=candidate.drop_date,
            days_until_drop=days_left,
            status=lifecycle_status(candidate.expiry_date, now),
            registrar=candidate.registrar,
            popularity_score=score.total,
            category=category,
            slug=domain_to_slug(candidate.domain_name),
            title=record_title(candidate.domain_name, days_left),
            metadata=metadata,
            last_updated=now,
        )
