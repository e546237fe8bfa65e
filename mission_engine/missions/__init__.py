"""
Missions package

- MissionStore: current daily and weekly sets and their completion state
- MissionGenerator / OpenAIMissionGenerator: where new mission content comes from
- build_weekly_missions: deterministic weekly set per character path
"""

from mission_engine.missions.catalog import build_weekly_missions
from mission_engine.missions.generator import MissionGenerator, OpenAIMissionGenerator
from mission_engine.missions.store import MissionStore

__all__ = [
    "build_weekly_missions",
    "MissionGenerator",
    "OpenAIMissionGenerator",
    "MissionStore",
]
