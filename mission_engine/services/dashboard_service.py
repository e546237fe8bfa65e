"""
DashboardService - Mission & Progression Business Logic

Owns one mission store and one user progress per session and exposes the
user actions (select path, complete mission, submit mood, generate mission)
as the only way to mutate them. Callers read state through dashboard() and
snapshot(); the reset scheduler gets the store through create_scheduler().
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Union

from mission_engine.config import DAILY_MISSION_COUNT, MISSION_GENERATION_TIMEOUT
from mission_engine.gamification import (
    AchievementEvaluator,
    AchievementTracker,
    apply_mood_bonus,
    apply_reward,
    increment_streak,
    rank_progress,
)
from mission_engine.gamification.progression import MOOD_XP_BONUS, PHOTO_BONUS_XP
from mission_engine.missions import MissionGenerator, MissionStore, build_weekly_missions
from mission_engine.missions.generator import call_with_timeout
from mission_engine.resilience import record_stale_generation
from mission_engine.models.mission import CharacterPath, MissionFrequency
from mission_engine.models.progress import MoodEntry, MoodType, UserProgress
from mission_engine.models.state import EngineState
from mission_engine.scheduler.reset_scheduler import ResetScheduler
from mission_engine.utils.datetime_helpers import local_date, now_utc

logger = logging.getLogger(__name__)


class DashboardService:
    """
    State container for one user's missions and progress.

    Responsibilities:
    - Mission completion and XP/streak bookkeeping
    - Daily mood check-in bonus
    - On-demand AI mission generation
    - Triggering the achievement evaluator after every XP change
    - Snapshot/restore for persistence
    """

    def __init__(
        self,
        generator: MissionGenerator,
        achievement_evaluator: Optional[AchievementEvaluator] = None,
        state: Optional[EngineState] = None,
        daily_mission_count: int = DAILY_MISSION_COUNT,
        generation_timeout: float = MISSION_GENERATION_TIMEOUT,
        clock: Callable[[], datetime] = now_utc,
    ):
        """
        Initialize DashboardService.

        Args:
            generator: Mission content source
            achievement_evaluator: Called with no arguments after XP changes;
                defaults to an AchievementTracker over this session's progress
            state: Snapshot to restore from
            daily_mission_count: Missions requested per daily cycle
            generation_timeout: Seconds before a generation request is abandoned
            clock: Returns the current aware datetime
        """
        self._generator = generator
        self._clock = clock
        self.daily_mission_count = daily_mission_count
        self.generation_timeout = generation_timeout
        self.store = MissionStore(generator, generation_timeout=generation_timeout, clock=clock)

        self.character_path: Optional[CharacterPath] = None
        self.progress = UserProgress()
        self.mood_entries: List[MoodEntry] = []
        self._lock = asyncio.Lock()

        if state is not None:
            self._restore(state)

        if achievement_evaluator is None:
            achievement_evaluator = AchievementTracker(
                lambda: self.progress,
                unlocked=state.achievements if state is not None else None,
            )
        self.achievements = achievement_evaluator

        logger.debug("DashboardService initialized")

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def create_scheduler(self, **kwargs: Any) -> ResetScheduler:
        """Reset scheduler bound to this session's store and path"""
        kwargs.setdefault("daily_count", self.daily_mission_count)
        kwargs.setdefault("clock", self._clock)
        return ResetScheduler(self.store, lambda: self.character_path, **kwargs)

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    async def select_path(self, path: CharacterPath) -> Dict[str, Any]:
        """
        Choose a character path and load its missions.

        The weekly set is built synchronously from the weekly table; the daily
        set is requested from the generator (empty if generation fails).
        Re-selecting the current path keeps both sets as they are; the reset
        scheduler is what renews them.
        """
        async with self._lock:
            changed = path != self.character_path
            self.character_path = path
            if changed or not self.store.has_cycle(MissionFrequency.WEEKLY):
                self.store.replace_set(
                    MissionFrequency.WEEKLY, build_weekly_missions(path, self._clock())
                )
            # Same path with no daily cycle yet: reload unless its first load is in flight
            reload_daily = changed or (
                not self.store.has_cycle(MissionFrequency.DAILY) and self.store.is_ready
            )

        logger.info(f"Character path selected: {path.value} (changed={changed})")
        if reload_daily:
            await self.store.load_initial(path, self.daily_mission_count)

        daily = self.store.daily_missions
        return {
            'success': True,
            'daily_missions': len(daily),
            'weekly_missions': len(self.store.weekly_missions),
            'message': (
                f"Welcome to the {path.value.capitalize()} path!"
                if daily else
                "Couldn't load today's missions. They will refresh at the next reset."
            ),
        }

    async def complete_mission(
        self,
        mission_id: str,
        bonus_xp: int = 0,
        with_photo: bool = False
    ) -> Dict[str, Any]:
        """
        Complete a mission and fold the reward into progress.

        Args:
            mission_id: Mission to complete
            bonus_xp: Extra XP on top of the mission reward
            with_photo: Proof photo attached; adds PHOTO_BONUS_XP

        Returns:
            {
                'success': bool,
                'xp_awarded': int,
                'bonus_xp': int,
                'rank_up': bool,
                'streak_updated': bool,
                'current_streak': int,
                'message': str
            }
        """
        if bonus_xp < 0:
            logger.warning(f"Rejected completion of {mission_id}: negative bonus {bonus_xp}")
            return self._empty_result("Bonus XP must be non-negative.")

        bonus = bonus_xp + (PHOTO_BONUS_XP if with_photo else 0)

        async with self._lock:
            completion = self.store.complete_mission(mission_id, bonus)
            if completion is None:
                return self._empty_result("This mission is no longer available.")

            old_rank = self.progress.rank
            self.progress = apply_reward(self.progress, completion.reward, from_mission=True)

            streak_updated = False
            if completion.daily_set_completed:
                old_streak = self.progress.streak
                self.progress = increment_streak(self.progress, local_date(self._clock()))
                streak_updated = self.progress.streak != old_streak

            self._check_achievements()

        if bonus > 0:
            message = f"Mission completed! +{completion.xp_reward} XP + {bonus} bonus XP"
        else:
            message = f"Mission completed! +{completion.xp_reward} XP"
        if streak_updated:
            message += f"\n🔥 All daily missions done! {self.progress.streak} day streak"

        return {
            'success': True,
            'xp_awarded': completion.reward,
            'bonus_xp': bonus,
            'rank_up': self.progress.rank != old_rank,
            'streak_updated': streak_updated,
            'current_streak': self.progress.streak,
            'message': message,
        }

    async def submit_mood(
        self,
        mood: Union[MoodType, str],
        today: Optional[date] = None
    ) -> Dict[str, Any]:
        """
        Record the daily mood check-in and grant its XP bonus.

        Args:
            mood: MoodType or picker emoji (unknown emoji counts as 'okay')
            today: Calendar day of the check-in (defaults to today in the reset timezone)
        """
        if not isinstance(mood, MoodType):
            mood = MoodType.from_emoji(mood)
        if today is None:
            today = local_date(self._clock())

        async with self._lock:
            if self.progress.has_mood_submitted_today(today):
                logger.info(f"Mood already submitted on {today.isoformat()}, ignoring")
                return self._empty_result("Mood already submitted today.")

            old_rank = self.progress.rank
            self.mood_entries.insert(0, MoodEntry(date=today, mood=mood))
            self.progress = apply_mood_bonus(self.progress, today)
            self._check_achievements()

        return {
            'success': True,
            'xp_awarded': MOOD_XP_BONUS,
            'bonus_xp': 0,
            'rank_up': self.progress.rank != old_rank,
            'streak_updated': False,
            'current_streak': self.progress.streak,
            'message': f"Mood submitted: {mood.label} {mood.emoji}",
        }

    async def generate_ai_mission(self) -> Dict[str, Any]:
        """
        Ask the generator for one extra daily mission.

        Failure is reported in the message only; nothing is mutated unless a
        mission comes back, the daily set is ready, and no daily reload began
        while the request was in flight.
        """
        path = self.character_path
        if path is None:
            return {'success': False, 'mission': None, 'message': "Choose a character path first."}
        token = self.store.cycle

        try:
            mission = await call_with_timeout(
                self._generator.generate_ai_mission(path),
                self.generation_timeout,
                operation="generate_ai_mission",
            )
        except Exception as e:
            logger.warning(f"AI mission generation failed: {e}")
            mission = None

        if mission is None:
            return {
                'success': False,
                'mission': None,
                'message': "Failed to generate mission. Please try again later.",
            }

        async with self._lock:
            if self.store.cycle != token:
                logger.info(
                    f"Discarding AI mission {mission.id} from superseded cycle {token} "
                    f"(current cycle {self.store.cycle})"
                )
                record_stale_generation()
                return {
                    'success': False,
                    'mission': None,
                    'message': "Missions were refreshed meanwhile. Please try again.",
                }
            added = self.store.add_mission(mission)
            if added:
                mission = self.store.get_mission(mission.id)

        if not added:
            return {
                'success': False,
                'mission': None,
                'message': "Missions are still loading. Please try again in a moment.",
            }

        return {'success': True, 'mission': mission, 'message': f"New mission generated: {mission.title}"}

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def dashboard(self) -> Dict[str, Any]:
        """Everything the dashboard screen renders"""
        header = rank_progress(self.progress.xp)
        return {
            'character_path': self.character_path,
            'xp': self.progress.xp,
            'level': self.progress.level,
            'rank': self.progress.rank,
            'next_rank': header['next_rank'],
            'next_rank_xp': header['next_rank_xp'],
            'rank_progress': header['progress'],
            'streak': self.progress.streak,
            'missions_loading': not self.store.is_ready,
            'daily_missions': self.store.daily_missions,
            'weekly_missions': self.store.weekly_missions,
            'has_mood_submitted_today': self.progress.has_mood_submitted_today(
                local_date(self._clock())
            ),
        }

    def snapshot(self) -> EngineState:
        """Serializable copy of the whole session"""
        unlocked = getattr(self.achievements, "unlocked", [])
        return EngineState(
            character_path=self.character_path,
            daily_status=self.store.daily_status,
            daily_missions=self.store.daily_missions,
            weekly_missions=self.store.weekly_missions,
            progress=self.progress,
            mood_entries=list(self.mood_entries),
            achievements=list(unlocked),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _restore(self, state: EngineState) -> None:
        self.character_path = state.character_path
        self.progress = state.progress
        self.mood_entries = list(state.mood_entries)
        self.store.restore(state.daily_missions, state.weekly_missions, state.daily_status)
        logger.info(
            f"Restored session: path={state.character_path}, xp={state.progress.xp}, "
            f"daily={len(state.daily_missions)}, weekly={len(state.weekly_missions)}"
        )

    def _check_achievements(self) -> None:
        """Run the evaluator; its failures never block progression"""
        try:
            self.achievements.check_achievements()
        except Exception as e:
            logger.error(f"Achievement check failed: {e}", exc_info=True)

    def _empty_result(self, message: str) -> Dict[str, Any]:
        return {
            'success': False,
            'xp_awarded': 0,
            'bonus_xp': 0,
            'rank_up': False,
            'streak_updated': False,
            'current_streak': self.progress.streak,
            'message': message,
        }
