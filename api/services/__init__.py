# api/services/__init__.py
"""
API Services Package

Keeps business logic out of the route handlers.
"""

from api.services.email_service import EmailService, get_email_service
from api.services.dashboard_service import DashboardService, get_dashboard_service

__all__ = ["EmailService", "get_email_service", "DashboardService", "get_dashboard_service"]
