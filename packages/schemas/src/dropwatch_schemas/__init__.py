"""Schemas package."""

from dropwatch_schemas.score import QualityScore
from dropwatch_schemas.domain import CandidateDomain, DomainRecord, record_title
from dropwatch_schemas.query import DomainQuery, DomainPage, DomainStats, SORT_FIELDS
from dropwatch_schemas.validation_rules import (
    is_valid_domain,
    clean_domain,
    split_domain,
    domain_to_slug,
    domain_from_slug,
)

__all__ = [
    "QualityScore",
    "CandidateDomain",
    "DomainRecord",
    "record_title",
    "DomainQuery",
    "DomainPage",
    "DomainStats",
    "SORT_FIELDS",
    "is_valid_domain",
    "clean_domain",
    "split_domain",
    "domain_to_slug",
    "domain_from_slug",
]
