"""Portfolio statistics over a claim snapshot."""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, Optional

from ..models.analytics import CategoryCount, PortfolioAnalytics
from ..models.claim import Claim
from ..models.claim_set import ClaimSet, Provenance

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "project"


def compute_analytics(
    claims: Iterable[Claim],
    provenance: Optional[Provenance] = None,
) -> PortfolioAnalytics:
    """Derive counts, average rating and distributions.

    Missing stars count as 0 in the average. Categories with equal counts
    keep the order in which they were first seen.
    """
    claims = list(claims)
    count = len(claims)

    if count:
        average = sum(claim.stars or 0 for claim in claims) / count
        # halves round up: 4.25 -> "4.3"
        average_rating = str(Decimal(str(average)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
    else:
        average_rating = "0.0"

    per_category: Dict[str, int] = {}
    distribution = {star: 0 for star in range(1, 6)}
    for claim in claims:
        category = claim.aspect or DEFAULT_CATEGORY
        per_category[category] = per_category.get(category, 0) + 1
        if claim.stars in distribution:
            distribution[claim.stars] += 1

    # sorted() is stable, so ties stay in first-seen order
    breakdown = [
        CategoryCount(category=category, count=n)
        for category, n in sorted(per_category.items(), key=lambda item: -item[1])
    ]

    return PortfolioAnalytics(
        count=count,
        average_rating=average_rating,
        category_breakdown=breakdown,
        rating_distribution=distribution,
        provenance=provenance,
    )


class AnalyticsService:
    """Computes analytics for whatever set the mode resolver exposed."""

    def summarize(self, claim_set: ClaimSet) -> PortfolioAnalytics:
        analytics = compute_analytics(claim_set.claims, claim_set.provenance)
        logger.info(
            f"📊 {analytics.count} {claim_set.provenance.value} claims, average rating {analytics.average_rating}"
        )
        return analytics
