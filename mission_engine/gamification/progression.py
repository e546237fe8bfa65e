"""
XP, Level and Rank Progression

Pure computation of level/rank from XP plus the bookkeeping that turns a
reward into a new UserProgress.

Leveling Curve:
- Flat 100 XP per level, level 1 at 0 XP

Rank Ladder (closed-open, boundary belongs to the higher rank):
- Genin:  0-499 XP
- Chunin: 500-999 XP
- Jounin: 1000-1999 XP
- Hokage: 2000+ XP

XP Award Rules:
- Mission completion: mission.xp_reward + bonus
- Proof photo attached to a completion: 10 XP bonus
- Daily mood check-in: 20 XP, once per calendar day
"""

from datetime import date
import logging

from mission_engine.exceptions import ValidationError
from mission_engine.models.progress import NinjaRank, UserProgress

logger = logging.getLogger(__name__)

XP_PER_LEVEL = 100
MOOD_XP_BONUS = 20
PHOTO_BONUS_XP = 10

# XP at which each rank begins, lowest first
RANK_THRESHOLDS = {
    NinjaRank.GENIN: 0,
    NinjaRank.CHUNIN: 500,
    NinjaRank.JOUNIN: 1000,
    NinjaRank.HOKAGE: 2000,
}

# Target shown in the progress bar once Hokage is reached
BEYOND_HOKAGE_XP = 3000

_RANK_ORDER = list(RANK_THRESHOLDS)


def calculate_level(xp: int) -> int:
    """Level from total XP: floor(xp / 100) + 1"""
    return max(xp, 0) // XP_PER_LEVEL + 1


def calculate_rank(xp: int) -> NinjaRank:
    """Highest rank whose threshold xp has reached"""
    rank = NinjaRank.GENIN
    for candidate, threshold in RANK_THRESHOLDS.items():
        if xp >= threshold:
            rank = candidate
    return rank


def next_rank(rank: NinjaRank) -> NinjaRank:
    """Rank after the given one; Hokage is its own successor"""
    index = _RANK_ORDER.index(rank)
    return _RANK_ORDER[min(index + 1, len(_RANK_ORDER) - 1)]


def next_rank_xp(xp: int) -> int:
    """XP needed for the next rank (3000 once Hokage is reached)"""
    for threshold in RANK_THRESHOLDS.values():
        if xp < threshold:
            return threshold
    return BEYOND_HOKAGE_XP


def rank_progress(xp: int) -> dict:
    """
    Summary used by the dashboard header

    Returns:
        {
            'xp': int,
            'level': int,
            'rank': NinjaRank,
            'next_rank': NinjaRank,
            'next_rank_xp': int,
            'progress': float (xp / next_rank_xp, capped at 1.0)
        }
    """
    rank = calculate_rank(xp)
    target = next_rank_xp(xp)
    return {
        "xp": xp,
        "level": calculate_level(xp),
        "rank": rank,
        "next_rank": next_rank(rank),
        "next_rank_xp": target,
        "progress": min(xp / target, 1.0),
    }


def apply_reward(progress: UserProgress, reward: int, from_mission: bool = True) -> UserProgress:
    """
    Fold a reward into progress

    Args:
        progress: Current progress (not modified)
        reward: XP to add, must be non-negative
        from_mission: Whether the reward came from a mission completion;
            mission rewards also bump the completion counters

    Returns:
        New UserProgress with level and rank recomputed
    """
    if reward < 0:
        raise ValidationError("Reward must be non-negative", field="reward", value=reward)

    update = {"xp": progress.xp + reward}
    if from_mission:
        update["completed_missions"] = progress.completed_missions + 1
        update["total_missions_completed"] = progress.total_missions_completed + 1

    new_progress = UserProgress(**{**progress.model_dump(), **update})

    logger.info(
        f"Awarded {reward} XP. Total: {new_progress.xp} XP, "
        f"Level: {new_progress.level}, Rank: {new_progress.rank.label}"
    )
    if new_progress.rank != progress.rank:
        logger.info(f"Rank up: {progress.rank.label} → {new_progress.rank.label}")

    return new_progress


def apply_mood_bonus(progress: UserProgress, today: date) -> UserProgress:
    """
    Grant the daily mood bonus

    A second call on the same calendar day returns progress unchanged.
    """
    if progress.has_mood_submitted_today(today):
        logger.info(f"Mood bonus already granted on {today.isoformat()}, ignoring")
        return progress

    rewarded = apply_reward(progress, MOOD_XP_BONUS, from_mission=False)
    return rewarded.model_copy(update={"mood_submitted_on": today})


def increment_streak(progress: UserProgress, today: date) -> UserProgress:
    """
    One more fully completed daily cycle

    The streak counts calendar days, so a second call on the same day
    returns progress unchanged.
    """
    if progress.streak_updated_on == today:
        logger.info(f"Streak already counted on {today.isoformat()}, ignoring")
        return progress

    new_progress = progress.model_copy(
        update={"streak": progress.streak + 1, "streak_updated_on": today}
    )
    logger.info(f"Daily set completed, streak {progress.streak} → {new_progress.streak}")
    return new_progress
