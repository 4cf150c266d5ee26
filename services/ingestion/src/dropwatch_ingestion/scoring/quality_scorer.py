"""Deterministic commercial-quality scoring for domain names."""

import re
from typing import Iterable, List, Tuple

from dropwatch_common import clamp
from dropwatch_schemas import CandidateDomain, QualityScore, split_domain
from dropwatch_ingestion.scoring.keywords import (
    CATEGORY_KEYWORDS,
    COMMON_AFFIXES,
    DEFAULT_CATEGORY,
    DEFAULT_TLD_POINTS,
    SHORT_NAME_TLDS,
    TLD_POINTS,
    TRENDING_BADGE_MIN_POINTS,
    TRENDING_KEYWORDS,
)

GIBBERISH_PATTERNS = (
    re.compile(r"^[bcdfghjklmnpqrstvwxyz]{5,}", re.IGNORECASE),
    re.compile(r"[xqz]{2,}", re.IGNORECASE),
    re.compile(r"^\d+[a-z]+$", re.IGNORECASE),
    re.compile(r"^[a-z]+\d+$", re.IGNORECASE),
)
VALUABLE_SUFFIX = re.compile(r"(ai|labs|hub|pro)$")
LETTERS_ONLY = re.compile(r"^[a-z]+$")
VOWELS = set("aeiou")

BADGE_TRENDING = "🔥 Trending"
BADGE_PREMIUM = "💎 Premium"
BADGE_HIGH_VALUE = "📈 High Value"
BADGE_SHORT = "⚡ Short"

REASONING_BANDS = (
    (80, "Exceptional domain with strong commercial potential"),
    (60, "Strong domain with good market appeal"),
    (40, "Decent domain with moderate potential"),
    (20, "Average domain with limited appeal"),
)
LOW_QUALITY_REASONING = "Low quality domain"
GIBBERISH_REASONING = "Gibberish pattern detected"


def is_gibberish(name: str) -> bool:
    return any(pattern.search(name) for pattern in GIBBERISH_PATTERNS)


def score_name_quality(name: str) -> int:
    """Length bucket, vowel balance and clean charset, clamped to 0..30."""
    points = 0
    length = len(name)

    if 2 <= length <= 8:
        points += 18
    elif 9 <= length <= 12:
        points += 12
    elif 13 <= length <= 16:
        points += 6
    elif length >= 17:
        points -= 10

    vowel_ratio = sum(1 for char in name if char in VOWELS) / length if length else 0
    if 0.25 <= vowel_ratio <= 0.6:
        points += 10

    points += -5 if any(char.isdigit() for char in name) else 5
    points += -5 if "-" in name else 5

    return int(clamp(points, 0, 30))


def score_trending_words(name: str) -> Tuple[int, List[str]]:
    """Keyword points (clamped to 25) and the trending badges they earn."""
    points = 0
    badges: List[str] = []

    for keyword, weight in TRENDING_KEYWORDS.items():
        if keyword in name:
            points += weight
            if weight >= TRENDING_BADGE_MIN_POINTS:
                badges.append(BADGE_TRENDING)

    return int(clamp(points, 0, 25)), badges


def score_historical_value(name: str, tld: str) -> int:
    points = 0
    if len(name) <= 5 and tld in SHORT_NAME_TLDS:
        points += 15
    if VALUABLE_SUFFIX.search(name):
        points += 10
    return int(clamp(points, 0, 25))


def score_technical_metrics(name: str, tld: str) -> int:
    """TLD tier, common affix, clean charset and a length penalty, clamped to -12..20."""
    points = TLD_POINTS.get(tld, DEFAULT_TLD_POINTS)

    if any(name.startswith(word) or name.endswith(word) for word in COMMON_AFFIXES):
        points += 5

    if LETTERS_ONLY.match(name):
        points += 5

    if len(name) >= 17:
        points -= 12
    elif len(name) >= 13:
        points -= 5

    return int(clamp(points, -12, 20))


def _unique(badges: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for badge in badges:
        if badge not in seen:
            seen.add(badge)
            ordered.append(badge)
    return ordered


def _reasoning(total: int) -> str:
    for threshold, text in REASONING_BANDS:
        if total >= threshold:
            return text
    return LOW_QUALITY_REASONING


def score_domain(domain: str) -> QualityScore:
    """
    Score a domain name for commercial quality.

    Pure and deterministic: the same name always gets the same score.

    Args:
        domain: Fully qualified name, e.g. "getcloudhub.com"

    Returns:
        QualityScore with component breakdown, badges and reasoning
    """
    name, tld = split_domain(domain.strip())

    if is_gibberish(name):
        return QualityScore(reasoning=GIBBERISH_REASONING)

    name_quality = score_name_quality(name)
    trending_words, badges = score_trending_words(name)
    historical_value = score_historical_value(name, tld)
    technical_metrics = score_technical_metrics(name, tld)

    total = int(clamp(name_quality + trending_words + historical_value + technical_metrics, 0, 100))

    if name_quality >= 25:
        badges.append(BADGE_PREMIUM)
    if historical_value >= 20:
        badges.append(BADGE_HIGH_VALUE)
    if len(name) <= 5:
        badges.append(BADGE_SHORT)

    return QualityScore(
        name_quality=name_quality,
        trending_words=trending_words,
        historical_value=historical_value,
        technical_metrics=technical_metrics,
        total=total,
        badges=_unique(badges),
        reasoning=_reasoning(total),
    )


def quality_tier(total: int) -> str:
    """Bucket a total score: premium, good, average or poor."""
    if total >= 75:
        return "premium"
    if total >= 50:
        return "good"
    if total >= 30:
        return "average"
    return "poor"


def categorize_domain(domain: str) -> str:
    """First keyword category whose keyword appears in the name."""
    name, _ = split_domain(domain)
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in name for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def rank_candidates(
    candidates: Iterable[CandidateDomain], max_count: int
) -> List[Tuple[CandidateDomain, QualityScore]]:
    """
    Score every candidate and keep the best max_count.

    Sort is by total descending and stable, so equal scores keep feed order.
    """
    scored = [(candidate, score_domain(candidate.domain_name)) for candidate in candidates]
    scored.sort(key=lambda pair: pair[1].total, reverse=True)
    return scored[:max_count]
