"""Keyword tables used by the quality scorer and categorizer."""

from typing import Dict, Final, Tuple

# Substring -> points. Weights of 20+ also earn the trending badge.
TRENDING_KEYWORDS: Final[Dict[str, int]] = {
    # AI / tech
    "ai": 25,
    "quantum": 24,
    "neural": 23,
    "llm": 22,
    "agent": 21,
    "autonomous": 20,
    "cloud": 15,
    "data": 12,
    # Crypto / web3
    "defi": 22,
    "web3": 21,
    "blockchain": 19,
    "nft": 18,
    "token": 17,
    # Climate
    "climate": 23,
    "carbon": 21,
    "renewable": 20,
    "solar": 19,
    "sustainable": 18,
    # Health
    "longevity": 24,
    "biohack": 22,
    "wellness": 20,
    "mental": 19,
    "therapy": 18,
    # Generic business
    "labs": 19,
    "pro": 18,
    "hub": 17,
    "studio": 16,
    "academy": 15,
    "shop": 12,
    "market": 12,
}

TRENDING_BADGE_MIN_POINTS: Final[int] = 20

TLD_POINTS: Final[Dict[str, int]] = {
    "com": 10,
    "ai": 9,
    "io": 8,
    "app": 7,
    "dev": 7,
    "co": 6,
    "net": 5,
    "org": 5,
}
DEFAULT_TLD_POINTS: Final[int] = 3

SHORT_NAME_TLDS: Final[Tuple[str, ...]] = ("com", "io", "ai")

COMMON_AFFIXES: Final[Tuple[str, ...]] = ("get", "my", "go", "use", "find", "make", "build")

CATEGORY_KEYWORDS: Final[Dict[str, Tuple[str, ...]]] = {
    "tech": ("ai", "app", "dev", "tech", "code", "cloud", "data", "api", "software"),
    "finance": ("pay", "coin", "crypto", "bank", "invest", "fund", "trade", "finance"),
    "ecommerce": ("shop", "store", "buy", "market", "sell", "deal", "cart"),
    "health": ("health", "fit", "med", "care", "wellness", "bio"),
    "gaming": ("game", "play", "esport", "stream", "gaming"),
    "education": ("learn", "edu", "course", "teach", "school"),
}
DEFAULT_CATEGORY: Final[str] = "general"
