"""Quality score model."""

from typing import Any, Dict, List
from pydantic import BaseModel, Field, ConfigDict


class QualityScore(BaseModel):
    """Commercial-quality estimate for a domain name, with its breakdown."""

    name_quality: int = Field(0, ge=0, le=30, description="Length/vowel/charset points")
    trending_words: int = Field(0, ge=0, le=25, description="Trending keyword points")
    historical_value: int = Field(0, ge=0, le=25, description="Short-name and suffix points")
    technical_metrics: int = Field(
        0, ge=-12, le=20, description="TLD tier, prefix/suffix and length points"
    )
    total: int = Field(0, ge=0, le=100, description="Clamped sum of the components")
    badges: List[str] = Field(default_factory=list, description="Display badges")
    reasoning: str = Field("", description="Short human-readable verdict")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name_quality": 30,
                "trending_words": 25,
                "historical_value": 10,
                "technical_metrics": 20,
                "total": 85,
                "badges": ["💎 Premium"],
                "reasoning": "Exceptional domain with strong commercial potential",
            }
        }
    )

    def as_metadata(self) -> Dict[str, Any]:
        """Breakdown in the camelCase shape stored on domain records."""
        return {
            "nameQuality": self.name_quality,
            "trendingWords": self.trending_words,
            "historicalValue": self.historical_value,
            "technicalMetrics": self.technical_metrics,
            "badges": list(self.badges),
            "reasoning": self.reasoning,
        }
