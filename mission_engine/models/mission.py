"""Mission models"""
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field


class CharacterPath(str, Enum):
    """Character path chosen during onboarding; drives mission flavour"""
    NARUTO = "naruto"
    SASUKE = "sasuke"
    SAKURA = "sakura"


class MissionFrequency(str, Enum):
    """Reset cycle a mission belongs to"""
    DAILY = "daily"
    WEEKLY = "weekly"


class Mission(BaseModel):
    """A time-boxed task with an XP reward"""
    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    description: str = ""
    xp_reward: int = Field(ge=0)
    frequency: MissionFrequency = MissionFrequency.DAILY
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    reset_time: datetime

    def should_reset(self, now: datetime) -> bool:
        """True once the mission's cycle has expired"""
        return now >= self.reset_time

    def mark_completed(self, completed_at: datetime) -> "Mission":
        """Return a completed copy; the original is left untouched"""
        return self.model_copy(update={"is_completed": True, "completed_at": completed_at})


class CompletionResult(BaseModel):
    """Outcome of a successful completion, handed to the progression layer"""
    mission_id: str
    frequency: MissionFrequency
    xp_reward: int
    bonus_xp: int = 0
    daily_set_completed: bool = False

    @property
    def reward(self) -> int:
        return self.xp_reward + self.bonus_xp
