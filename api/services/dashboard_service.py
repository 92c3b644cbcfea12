"""
Dashboard Service Implementation

Provides analytics aggregation and live queue statistics for the dashboard.
"""

import logging
from typing import Any, Dict

from fastapi import Request

logger = logging.getLogger(__name__)


class DashboardService:
    """
    Dashboard data provider.

    Analytics are aggregated by the record store on every call; queue
    statistics are read straight from the in-process queue.
    """

    def __init__(self, repository: Any, queue: Any):
        self.repository = repository
        self.queue = queue

    async def get_analytics(self) -> Dict[str, Any]:
        analytics = await self.repository.get_analytics()
        logger.debug(f"Analytics computed over {analytics['total_emails']} email(s)")
        return analytics

    def get_queue_stats(self) -> Dict[str, Dict[str, int]]:
        return self.queue.stats()


def get_dashboard_service(request: Request) -> DashboardService:
    """Build the dashboard service from the application state."""
    state = request.app.state
    return DashboardService(repository=state.repository, queue=state.queue)
