"""Monitoring infrastructure for mission-engine"""
from mission_engine.monitoring.sentry_config import init_sentry, set_user_context

__all__ = [
    "init_sentry",
    "set_user_context",
]
