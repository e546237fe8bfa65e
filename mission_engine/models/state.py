"""Serializable snapshot of a dashboard session"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from mission_engine.models.achievement import UserAchievement
from mission_engine.models.mission import CharacterPath, Mission
from mission_engine.models.progress import MoodEntry, UserProgress


class StoreStatus(str, Enum):
    """Readiness of the daily mission set"""
    LOADING = "loading"
    READY = "ready"


class EngineState(BaseModel):
    """Everything needed to rebuild a session after a restart"""
    character_path: Optional[CharacterPath] = None
    daily_status: StoreStatus = StoreStatus.READY
    daily_missions: list[Mission] = Field(default_factory=list)
    weekly_missions: list[Mission] = Field(default_factory=list)
    progress: UserProgress = Field(default_factory=UserProgress)
    mood_entries: list[MoodEntry] = Field(default_factory=list)
    achievements: list[UserAchievement] = Field(default_factory=list)
