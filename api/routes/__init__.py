"""
API Routes Package
"""

from api.routes import emails
from api.routes import dashboard

__all__ = ["emails", "dashboard"]
