"""
Dashboard API Routes

Analytics and live processing queue statistics for the monitoring views.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, status

from api.models.dashboard import AnalyticsResponse
from api.models.emails import QueueStatsResponse
from api.services.dashboard_service import DashboardService, get_dashboard_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get(
    "/analytics",
    response_model=AnalyticsResponse,
    summary="Get dashboard analytics"
)
async def get_analytics(
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    """
    Retrieve aggregate email metrics.

    Returns:
        Totals, sentiment distribution, status counts, average response
        time and resolution rate
    """
    try:
        return await dashboard_service.get_analytics()
    except Exception as e:
        logger.error(f"Error retrieving analytics: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch analytics"
        )


@router.get(
    "/queue-stats",
    response_model=QueueStatsResponse,
    summary="Get processing queue statistics"
)
async def get_queue_stats(
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    """Waiting and active queue items per priority class; safe to poll."""
    return dashboard_service.get_queue_stats()
