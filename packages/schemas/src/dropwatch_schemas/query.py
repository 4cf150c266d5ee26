"""Read-side query contract for listing domains."""

from datetime import datetime
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator

from dropwatch_common import DomainStatus, constants
from dropwatch_schemas.domain import DomainRecord

SORT_FIELDS = (
    "popularity_score",
    "drop_date",
    "created_at",
    "domain_name",
    "days_until_drop",
)


class DomainQuery(BaseModel):
    """Filters, ordering and paging for a domain listing."""

    status: Optional[DomainStatus] = Field(
        DomainStatus.PENDING_DELETE, description="Lifecycle status filter (None = any)"
    )
    tld: Optional[str] = Field(None, description="Exact TLD match")
    category: Optional[str] = Field(None, description="Exact category match")
    min_score: Optional[int] = Field(None, ge=0, le=100)
    max_score: Optional[int] = Field(None, ge=0, le=100)
    days_min: Optional[int] = Field(None, description="Minimum days until drop")
    days_max: Optional[int] = Field(None, description="Maximum days until drop")
    search: Optional[str] = Field(None, description="Case-insensitive substring")
    sort: str = Field("days_until_drop", description="Sort column")
    order: Literal["asc", "desc"] = Field("asc")
    limit: int = Field(constants.DEFAULT_PAGE_SIZE, ge=1)
    offset: int = Field(0, ge=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "pending_delete",
                "tld": "com",
                "min_score": 60,
                "days_max": 7,
                "sort": "popularity_score",
                "order": "desc",
                "limit": 20,
            }
        }
    )

    @field_validator("sort")
    @classmethod
    def fallback_sort(cls, value: str) -> str:
        # Unknown sort keys fall back to ranking by score
        return value if value in SORT_FIELDS else "popularity_score"

    @field_validator("limit")
    @classmethod
    def cap_limit(cls, value: int) -> int:
        return min(value, constants.MAX_PAGE_SIZE)

    @field_validator("tld", "search")
    @classmethod
    def lower_text(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().lower() if value else None


class DomainPage(BaseModel):
    """One page of a domain listing."""

    domains: List[DomainRecord] = Field(default_factory=list)
    count: int = Field(0, description="Total rows matching the filters")
    limit: int
    offset: int
    has_more: bool = False


class DomainStats(BaseModel):
    """Headline numbers for the listing front page."""

    total_pending: int = Field(0, description="pending_delete within the drop window")
    hot_domains: int = Field(0, description="Window records scoring at least 70")
    dropping_this_week: int = Field(0, description="Records dropping in 0-7 days")
    by_tld: Dict[str, int] = Field(default_factory=dict)
    last_updated: datetime
