"""
Gamification system for the mission engine

This module implements the progression side of the engine:
- XP, level and rank calculation
- Daily-set streak counting
- Mood check-in bonus
- Achievement evaluation
"""

from mission_engine.gamification.progression import (
    apply_mood_bonus,
    apply_reward,
    calculate_level,
    calculate_rank,
    increment_streak,
    rank_progress,
)
from mission_engine.gamification.achievement_system import AchievementEvaluator, AchievementTracker

__all__ = [
    "apply_mood_bonus",
    "apply_reward",
    "calculate_level",
    "calculate_rank",
    "increment_streak",
    "rank_progress",
    "AchievementEvaluator",
    "AchievementTracker",
]
