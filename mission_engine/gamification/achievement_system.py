"""
Achievement System

Re-checked after every XP-affecting change. The engine calls
check_achievements() with no arguments; the evaluator reads current progress
itself through the provider it was built with.

Categories:
- Milestones (total XP, ranks)
- Missions (completion counts)
- Consistency (daily-set streaks)
"""

from typing import Callable, Dict, List, Optional, Protocol
from datetime import datetime, timezone
import logging

from mission_engine.models.achievement import (
    Achievement,
    AchievementCategory,
    CriteriaType,
    UserAchievement,
)
from mission_engine.models.progress import UserProgress

logger = logging.getLogger(__name__)


class AchievementEvaluator(Protocol):
    """Zero-argument trigger invoked after progression changes"""

    def check_achievements(self) -> None:
        ...


ACHIEVEMENTS: List[Achievement] = [
    Achievement(
        id="first_mission",
        name="First Mission",
        description="Complete your first mission",
        icon="📜",
        category=AchievementCategory.MISSIONS,
        criteria_type=CriteriaType.MISSIONS_COMPLETED,
        threshold=1,
    ),
    Achievement(
        id="mission_veteran",
        name="Mission Veteran",
        description="Complete 50 missions",
        icon="🎯",
        category=AchievementCategory.MISSIONS,
        criteria_type=CriteriaType.MISSIONS_COMPLETED,
        threshold=50,
    ),
    Achievement(
        id="chunin_exam",
        name="Chunin Exam Passed",
        description="Reach the rank of Chunin",
        icon="🍃",
        category=AchievementCategory.MILESTONES,
        criteria_type=CriteriaType.TOTAL_XP,
        threshold=500,
    ),
    Achievement(
        id="elite_jounin",
        name="Elite Jounin",
        description="Reach the rank of Jounin",
        icon="🌀",
        category=AchievementCategory.MILESTONES,
        criteria_type=CriteriaType.TOTAL_XP,
        threshold=1000,
    ),
    Achievement(
        id="hokage",
        name="Hokage",
        description="Reach the rank of Hokage",
        icon="🔥",
        category=AchievementCategory.MILESTONES,
        criteria_type=CriteriaType.TOTAL_XP,
        threshold=2000,
    ),
    Achievement(
        id="week_warrior",
        name="Week Warrior",
        description="Fully complete 7 daily mission sets",
        icon="⚡",
        category=AchievementCategory.CONSISTENCY,
        criteria_type=CriteriaType.STREAK,
        threshold=7,
    ),
]


def _criteria_value(progress: UserProgress, criteria_type: CriteriaType) -> int:
    values: Dict[CriteriaType, int] = {
        CriteriaType.TOTAL_XP: progress.xp,
        CriteriaType.MISSIONS_COMPLETED: progress.total_missions_completed,
        CriteriaType.STREAK: progress.streak,
    }
    return values[criteria_type]


class AchievementTracker:
    """
    In-process evaluator over the ACHIEVEMENTS catalog.

    Unlocks are remembered so each achievement is awarded once.
    """

    def __init__(
        self,
        progress_provider: Callable[[], UserProgress],
        catalog: Optional[List[Achievement]] = None,
        unlocked: Optional[List[UserAchievement]] = None,
    ):
        self._progress_provider = progress_provider
        self.catalog = catalog if catalog is not None else ACHIEVEMENTS
        self._unlocked: Dict[str, UserAchievement] = {
            ua.achievement_id: ua for ua in (unlocked or [])
        }

    @property
    def unlocked(self) -> List[UserAchievement]:
        return list(self._unlocked.values())

    def is_unlocked(self, achievement_id: str) -> bool:
        return achievement_id in self._unlocked

    def check_achievements(self) -> List[Achievement]:
        """
        Unlock every achievement whose criteria the current progress meets

        Returns:
            Achievements unlocked by this call (may be empty)
        """
        progress = self._progress_provider()
        newly_unlocked = []

        for achievement in self.catalog:
            if achievement.id in self._unlocked:
                continue

            if _criteria_value(progress, achievement.criteria_type) >= achievement.threshold:
                self._unlocked[achievement.id] = UserAchievement(
                    achievement_id=achievement.id,
                    unlocked_at=datetime.now(timezone.utc),
                    metadata={"xp": progress.xp},
                )
                newly_unlocked.append(achievement)
                logger.info(f"Achievement unlocked: {achievement.name} {achievement.icon}")

        return newly_unlocked
