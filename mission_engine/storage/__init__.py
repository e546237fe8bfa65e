"""Persistence for engine state"""

from mission_engine.storage.state_store import StateStore

__all__ = ["StateStore"]
