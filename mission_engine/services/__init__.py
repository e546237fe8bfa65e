"""
Service Layer Package

Business logic between the presentation layer (whatever renders the
dashboard) and the mission store / progression rules underneath.

- DashboardService: one user's session of missions, progress, mood check-ins
  and achievements
"""

from mission_engine.services.dashboard_service import DashboardService

__all__ = [
    "DashboardService",
]
