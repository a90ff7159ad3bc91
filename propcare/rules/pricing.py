"""
Price estimation for maintenance issues.

Catalog matches are preferred over the static per-category table.
"""

import logging
from typing import Any, Dict, List

from ..models import PriceEstimate, ServiceItem

logger = logging.getLogger(__name__)

CATALOG_CONFIDENCE = 80
CATEGORY_CONFIDENCE = 50
CATALOG_SEARCH_LIMIT = 5

# Pence, per category
CATEGORY_PRICING: Dict[str, Dict[str, int]] = {
    "plumbing": {"low": 7500, "mid": 12000, "high": 20000},
    "plumbing_emergency": {"low": 12000, "mid": 18000, "high": 30000},
    "electrical": {"low": 8000, "mid": 15000, "high": 25000},
    "electrical_emergency": {"low": 15000, "mid": 22000, "high": 35000},
    "heating": {"low": 10000, "mid": 20000, "high": 35000},
    "carpentry": {"low": 6000, "mid": 10000, "high": 18000},
    "locksmith": {"low": 8000, "mid": 12000, "high": 20000},
    "security": {"low": 10000, "mid": 15000, "high": 25000},
    "water_leak": {"low": 10000, "mid": 18000, "high": 30000},
    "appliance": {"low": 8000, "mid": 15000, "high": 25000},
    "cosmetic": {"low": 5000, "mid": 8000, "high": 15000},
    "upgrade": {"low": 15000, "mid": 30000, "high": 50000},
    "pest_control": {"low": 10000, "mid": 15000, "high": 25000},
    "cleaning": {"low": 5000, "mid": 10000, "high": 15000},
    "garden": {"low": 8000, "mid": 15000, "high": 25000},
    "general": {"low": 6000, "mid": 10000, "high": 18000},
    "other": {"low": 8000, "mid": 15000, "high": 25000},
}


def search_keywords(description: str) -> List[str]:
    """Words longer than three characters, first five, lowercased."""
    words = [w for w in (description or "").lower().split() if len(w) > 3]
    return words[:CATALOG_SEARCH_LIMIT]


def estimate_from_matches(matches: List[ServiceItem]) -> PriceEstimate:
    prices = [m.price_pence for m in matches]
    return PriceEstimate(
        low_price_pence=round(min(prices) * 0.9),
        high_price_pence=round(max(prices) * 1.1),
        mid_price_pence=round(sum(prices) / len(prices)),
        confidence=CATALOG_CONFIDENCE,
        matched_skus=[m.name for m in matches],
    )


def estimate_from_category(category: str) -> PriceEstimate:
    pricing = CATEGORY_PRICING.get(category) or CATEGORY_PRICING["general"]
    return PriceEstimate(
        low_price_pence=pricing["low"],
        high_price_pence=pricing["high"],
        mid_price_pence=pricing["mid"],
        confidence=CATEGORY_CONFIDENCE,
    )


async def estimate_price(description: str, category: str, store: Any) -> PriceEstimate:
    """
    Estimate the price range for an issue.

    Args:
        description: Free-text issue description
        category: Issue category, used when the catalog has no match
        store: Anything with ``async search_services(keywords, limit)``

    Returns:
        PriceEstimate (confidence 80 from catalog matches, 50 from the table)
    """
    keywords = search_keywords(description)
    matches: List[ServiceItem] = []

    if keywords and store is not None:
        try:
            matches = await store.search_services(keywords, limit=CATALOG_SEARCH_LIMIT)
        except Exception as e:
            logger.error(f"Catalog search failed, using category pricing: {e}", exc_info=True)
            matches = []

    if matches:
        return estimate_from_matches(matches)

    return estimate_from_category(category)
