import logging
from collections import Counter
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping
from uuid import UUID

from app.core.constants import TOP_PROPERTIES_LIMIT, WON_STATUS
from app.repositories.lead_repository import LeadRepository
from app.schemas.analytics import LeadsAnalytics, TopProperty

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


def conversion_rate(won: int, total: int) -> int:
    """Percentage of won leads, rounded half-up to a whole number."""
    if total <= 0:
        return 0
    ratio = Decimal(won) * 100 / Decimal(total)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def summarize_leads(rows: Iterable[Mapping[str, Any]]) -> LeadsAnalytics:
    """Reduce lead rows to the dashboard summary in a single pass.

    Each row needs ``status``, ``source``, ``property_id`` and
    ``property_title``.  Missing status/source values are counted under
    ``"Unknown"``; leads without a titled property do not count towards
    the top properties.  Ties keep first-seen order.
    """
    by_source: Dict[str, int] = {}
    by_status: Dict[str, int] = {}
    property_counts: Counter = Counter()
    titles: Dict[Any, str] = {}
    total = 0
    won = 0

    for row in rows:
        total += 1
        source = row.get("source") or UNKNOWN
        by_source[source] = by_source.get(source, 0) + 1

        status = row.get("status") or UNKNOWN
        by_status[status] = by_status.get(status, 0) + 1
        if status == WON_STATUS:
            won += 1

        property_id = row.get("property_id")
        title = row.get("property_title")
        if property_id and title:
            titles.setdefault(property_id, title)
            property_counts[property_id] += 1

    # Counter.most_common is stable for equal counts (insertion order)
    top: List[TopProperty] = [
        TopProperty(title=titles[pid], count=count)
        for pid, count in property_counts.most_common(TOP_PROPERTIES_LIMIT)
    ]

    return LeadsAnalytics(
        total=total,
        by_source=by_source,
        by_status=by_status,
        conversion_rate=conversion_rate(won, total),
        top_properties=top,
    )


class LeadAnalyticsService:
    """Aggregated lead metrics for the dashboard."""

    def __init__(self, lead_repo: LeadRepository) -> None:
        self._lead_repo = lead_repo

    async def summary(self, tenant_id: UUID) -> LeadsAnalytics:
        rows = await self._lead_repo.analytics_rows(tenant_id)
        result = summarize_leads(rows)
        logger.debug(
            "Analytics for tenant %s: %s leads, %s%% converted",
            tenant_id,
            result.total,
            result.conversion_rate,
        )
        return result
