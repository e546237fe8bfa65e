"""Progression models: rank, mood and the user's cumulative progress"""
from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class NinjaRank(str, Enum):
    """Rank ladder, lowest first"""
    GENIN = "genin"
    CHUNIN = "chunin"
    JOUNIN = "jounin"
    HOKAGE = "hokage"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class MoodType(str, Enum):
    """Daily mood check-in options"""
    SAD = "sad"
    OKAY = "okay"
    GOOD = "good"
    GREAT = "great"
    AMAZING = "amazing"

    @property
    def emoji(self) -> str:
        return MOOD_EMOJIS[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def from_emoji(cls, emoji: str) -> "MoodType":
        """Resolve a picker emoji; unknown input counts as 'okay'"""
        for mood, mood_emoji in MOOD_EMOJIS.items():
            if mood_emoji == emoji:
                return mood
        return cls.OKAY


MOOD_EMOJIS = {
    MoodType.SAD: "😢",
    MoodType.OKAY: "😐",
    MoodType.GOOD: "🙂",
    MoodType.GREAT: "😄",
    MoodType.AMAZING: "🤩",
}


class MoodEntry(BaseModel):
    """One mood check-in"""
    date: date
    mood: MoodType


class UserProgress(BaseModel):
    """
    Cumulative progress for one user.

    level and rank are always recomputed from xp on construction, so a
    snapshot carrying stale values is corrected when it is loaded.
    """
    xp: int = Field(default=0, ge=0)
    level: int = 1
    rank: NinjaRank = NinjaRank.GENIN
    streak: int = Field(default=0, ge=0)
    completed_missions: int = Field(default=0, ge=0)
    total_missions_completed: int = Field(default=0, ge=0)
    mood_submitted_on: Optional[date] = None
    streak_updated_on: Optional[date] = None

    @model_validator(mode="after")
    def _derive_level_and_rank(self) -> "UserProgress":
        # Imported lazily: progression imports this module
        from mission_engine.gamification.progression import calculate_level, calculate_rank

        self.level = calculate_level(self.xp)
        self.rank = calculate_rank(self.xp)
        return self

    def has_mood_submitted_today(self, today: date) -> bool:
        return self.mood_submitted_on == today
