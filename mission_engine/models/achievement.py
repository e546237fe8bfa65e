"""Achievement models for gamification"""
from enum import Enum
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class AchievementCategory(str, Enum):
    """Achievement categories"""
    CONSISTENCY = "consistency"
    MILESTONES = "milestones"
    MISSIONS = "missions"


class CriteriaType(str, Enum):
    """Which progress field an achievement is measured against"""
    TOTAL_XP = "total_xp"
    MISSIONS_COMPLETED = "missions_completed"
    STREAK = "streak"


class Achievement(BaseModel):
    """Achievement definition"""
    id: str
    name: str
    description: str
    icon: str
    category: AchievementCategory
    criteria_type: CriteriaType
    threshold: int


class UserAchievement(BaseModel):
    """User's unlocked achievement"""
    achievement_id: str
    unlocked_at: datetime
    metadata: Optional[dict] = None
