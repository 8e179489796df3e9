"""Portfolio statistics derived from a claim set."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .claim_set import Provenance


class CategoryCount(BaseModel):
    category: str
    count: int


class PortfolioAnalytics(BaseModel):
    """Counts, average rating and distributions for one snapshot of claims."""

    count: int = Field(..., description="Number of claims")
    average_rating: str = Field(..., description="Mean stars to one decimal, e.g. '4.3'")
    category_breakdown: List[CategoryCount] = Field(
        default_factory=list,
        description="Claims per category, most frequent first",
    )
    rating_distribution: Dict[int, int] = Field(
        default_factory=lambda: {star: 0 for star in range(1, 6)},
        description="Claims per star value 1-5",
    )
    provenance: Optional[Provenance] = None

    def top_categories(self, n: int = 3) -> List[CategoryCount]:
        return self.category_breakdown[:n]

    @property
    def top_category(self) -> Optional[str]:
        if not self.category_breakdown:
            return None
        return self.category_breakdown[0].category
