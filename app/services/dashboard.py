"""
Dashboard views and metrics.

A ``DashboardView`` holds the last fetched record list of one admin list
(complaints or apologies) for one session. Refreshes may overlap when
filters change quickly; only the most recently started refresh is allowed
to replace the list, earlier ones are dropped when they finish.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from app.core.exceptions import BaseAppException, StaleResponseError
from app.schemas.analytics import (
    AdminAnalytics,
    DashboardMetrics,
    StatusSummary,
    StudentAnalytics,
)
from app.services.aggregation import (
    aggregate,
    average_resolution_time,
    average_response_time,
    category_breakdown,
    monthly_trend,
    status_breakdown,
)
from app.services.integrations.hostel_api import HostelApiClient
from app.utils.formatters import round_half_up

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
Fetcher = Callable[[], Awaitable[List[Record]]]

RECENT_LIMIT = 3


class DashboardView:
    """
    Record list of one view with last-request-wins refresh.

    Args:
        name: View name used in logs, e.g. ``complaints``.
    """

    def __init__(self, name: str):
        self.name = name
        self.records: List[Record] = []
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def refresh(self, fetch: Fetcher) -> List[Record]:
        """
        Fetch and apply a new record list.

        Raises:
            StaleResponseError: A newer refresh started while this one ran;
                its result was discarded.
            BaseAppException: The fetch failed and this refresh is still the
                newest; the list is emptied before re-raising.
        """
        self._generation += 1
        generation = self._generation

        try:
            records = await fetch()
        except BaseAppException:
            if not self._is_current(generation):
                logger.info(f"Ignoring failure of superseded {self.name} refresh #{generation}")
                raise StaleResponseError(self.name, generation, self._generation)
            self.records = []
            raise

        if not self._is_current(generation):
            logger.info(
                f"Dropping stale {self.name} response #{generation}, current is #{self._generation}"
            )
            raise StaleResponseError(self.name, generation, self._generation)

        self.records = records
        logger.debug(f"Applied {self.name} refresh #{generation} with {len(records)} records")
        return records


class DashboardViewRegistry:
    """In-process views keyed by session and view name."""

    def __init__(self):
        self._views: Dict[Tuple[str, str], DashboardView] = {}

    def get(self, session_key: str, name: str) -> DashboardView:
        key = (session_key, name)
        if key not in self._views:
            self._views[key] = DashboardView(name)
        return self._views[key]

    def drop_session(self, session_key: str) -> None:
        for key in [key for key in self._views if key[0] == session_key]:
            del self._views[key]


# ==================== Server metrics ====================

def _as_dict(value: Any) -> Dict[str, Any]:
    if isinstance(value, dict):
        data = value.get("data")
        return data if isinstance(data, dict) else value
    return {}


def _number(value: Any, default: float = 0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


async def _metric(name: str, call: Awaitable[Any], degraded: List[str]) -> Optional[Any]:
    try:
        return await call
    except BaseAppException as e:
        logger.warning(f"Dashboard metric '{name}' unavailable: {e.message}")
        degraded.append(name)
        return None


async def load_dashboard_metrics(client: HostelApiClient) -> DashboardMetrics:
    """
    Fetch the server-side dashboard metrics concurrently.

    Each metric falls back to its zero default on its own when its call
    fails, so one broken metric never blanks the whole dashboard.
    """
    degraded: List[str] = []
    summary_raw, rate_raw, pending_raw, pending_apologies = await asyncio.gather(
        _metric("status-summary", client.status_summary(), degraded),
        _metric("resolution-rate", client.resolution_rate(), degraded),
        _metric("pending-count", client.pending_count(), degraded),
        _metric("pending-apologies", client.pending_apologies_count(), degraded),
    )

    summary = _as_dict(summary_raw)
    raw_rate = _as_dict(rate_raw).get("resolutionRate")
    rate = _number(raw_rate)
    pending = _as_dict(pending_raw).get("pendingCount")
    if pending is None:
        pending = summary.get("open")

    return DashboardMetrics(
        status_summary=StatusSummary(
            total=int(_number(summary.get("total"))),
            resolved=int(_number(summary.get("resolved"))),
            open=int(_number(summary.get("open"))),
            inprogress=int(_number(summary.get("inprogress") or summary.get("inProgress"))),
        ),
        resolution_rate=rate,
        resolution_rate_label=f"{round_half_up(rate)}%" if raw_rate is not None else "—%",
        pending_count=int(_number(pending)),
        pending_apologies=pending_apologies or 0,
        degraded=sorted(degraded),
    )


# ==================== Analytics ====================

def build_admin_analytics(complaints: List[Record], visible: List[Record]) -> AdminAnalytics:
    """
    Charts for the admin dashboard.

    Args:
        complaints: Filtered complaints, which drive every chart.
        visible: Filtered records of the active tab, which drive the
            headline counts.
    """
    return AdminAnalytics(
        stats=aggregate(visible),
        category_breakdown=category_breakdown(complaints),
        status_breakdown=status_breakdown(complaints),
        monthly_trend=monthly_trend(complaints),
        average_resolution_time=average_resolution_time(complaints),
    )


def build_student_analytics(complaints: List[Record], apologies: List[Record]) -> StudentAnalytics:
    return StudentAnalytics(
        complaints=aggregate(complaints),
        apologies=aggregate(apologies),
        status_breakdown=status_breakdown(complaints, open_label="Pending"),
        monthly_trend=monthly_trend(complaints),
        average_response_time=average_response_time(complaints),
        recent_complaints=complaints[:RECENT_LIMIT],
        recent_apologies=apologies[:RECENT_LIMIT],
    )


__all__ = [
    "DashboardView",
    "DashboardViewRegistry",
    "load_dashboard_metrics",
    "build_admin_analytics",
    "build_student_analytics",
]
