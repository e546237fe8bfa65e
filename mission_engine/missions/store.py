"""
MissionStore - current daily and weekly mission sets

Holds both sets and their completion state. All mutations except the
generator await are synchronous, so on a single event loop each one finishes
before a scheduler tick or another user action can run.

Daily generation is fail-soft: any failure (exception, timeout, empty result)
leaves an empty ready set. Every daily load takes a new cycle token and a
response whose token is no longer current is discarded.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from mission_engine.config import MISSION_GENERATION_TIMEOUT
from mission_engine.exceptions import ValidationError
from mission_engine.missions.generator import MissionGenerator, call_with_timeout
from mission_engine.models.mission import CharacterPath, CompletionResult, Mission, MissionFrequency
from mission_engine.models.state import StoreStatus
from mission_engine.resilience import (
    record_mission_completion,
    record_stale_generation,
)
from mission_engine.utils.datetime_helpers import next_reset_time, now_utc

logger = logging.getLogger(__name__)


class MissionStore:
    """Owner of the daily and weekly mission sets"""

    def __init__(
        self,
        generator: MissionGenerator,
        generation_timeout: float = MISSION_GENERATION_TIMEOUT,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._generator = generator
        self.generation_timeout = generation_timeout
        self._clock = clock

        self._sets: Dict[MissionFrequency, List[Mission]] = {
            MissionFrequency.DAILY: [],
            MissionFrequency.WEEKLY: [],
        }
        # Reset time of each set as a whole; decides expiry while a set is empty
        self._set_reset_times: Dict[MissionFrequency, Optional[datetime]] = {
            MissionFrequency.DAILY: None,
            MissionFrequency.WEEKLY: None,
        }
        # Ids completed in each set's current cycle, kept across rebuilds of that cycle
        self._completed: Dict[MissionFrequency, Dict[str, datetime]] = {
            MissionFrequency.DAILY: {},
            MissionFrequency.WEEKLY: {},
        }
        self.daily_status = StoreStatus.READY
        self._cycle = 0

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def daily_missions(self) -> List[Mission]:
        return list(self._sets[MissionFrequency.DAILY])

    @property
    def weekly_missions(self) -> List[Mission]:
        return list(self._sets[MissionFrequency.WEEKLY])

    @property
    def is_ready(self) -> bool:
        return self.daily_status is StoreStatus.READY

    @property
    def cycle(self) -> int:
        """Token of the most recent daily generation cycle"""
        return self._cycle

    def missions(self, frequency: MissionFrequency) -> List[Mission]:
        return list(self._sets[frequency])

    def has_cycle(self, frequency: MissionFrequency) -> bool:
        """Whether the set has been generated at least once"""
        return self._set_reset_times[frequency] is not None

    def get_mission(self, mission_id: str) -> Optional[Mission]:
        for missions in self._sets.values():
            for mission in missions:
                if mission.id == mission_id:
                    return mission
        return None

    def needs_reset(self, frequency: MissionFrequency, now: datetime) -> bool:
        """
        Whether the set's cycle has expired

        The first mission is the set's representative. An empty set uses the
        reset time recorded when it was (re)generated; a set that was never
        generated never expires.
        """
        if frequency is MissionFrequency.DAILY and not self.is_ready:
            return False

        missions = self._sets[frequency]
        if missions:
            return missions[0].should_reset(now)

        set_reset_time = self._set_reset_times[frequency]
        return set_reset_time is not None and now >= set_reset_time

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def load_initial(self, path: CharacterPath, count: int) -> bool:
        """
        Replace the daily set with freshly generated missions

        The current daily set is discarded immediately and the store stays in
        loading state until the generator answers.

        Returns:
            True if the response was applied, False if a newer cycle
            superseded it while it was in flight
        """
        self._cycle += 1
        token = self._cycle
        self.daily_status = StoreStatus.LOADING
        self._sets[MissionFrequency.DAILY] = []

        logger.info(f"Loading {count} daily missions for {path.value} (cycle {token})")
        missions = await self._generate(path, count)

        if token != self._cycle:
            logger.info(
                f"Discarding {len(missions)} missions from superseded cycle {token} "
                f"(current cycle {self._cycle})"
            )
            record_stale_generation()
            return False

        self._apply_set(MissionFrequency.DAILY, missions)
        self.daily_status = StoreStatus.READY
        logger.info(f"Daily set ready with {len(missions)} missions (cycle {token})")
        return True

    def add_mission(self, mission: Mission) -> bool:
        """Append one mission to the daily set; no-op unless the store is ready"""
        if not self.is_ready:
            logger.info(f"Ignoring add of mission {mission.id}: daily missions still loading")
            return False

        if mission.frequency is not MissionFrequency.DAILY:
            mission = mission.model_copy(update={"frequency": MissionFrequency.DAILY})

        # The added mission expires with the set it joins
        set_reset_time = self._set_reset_times[MissionFrequency.DAILY]
        if set_reset_time is None:
            self._set_reset_times[MissionFrequency.DAILY] = mission.reset_time
        elif mission.reset_time != set_reset_time:
            mission = mission.model_copy(update={"reset_time": set_reset_time})

        self._sets[MissionFrequency.DAILY] = [*self._sets[MissionFrequency.DAILY], mission]
        logger.info(f"Added mission {mission.id} ({mission.title}) to daily set")
        return True

    def complete_mission(self, mission_id: str, bonus_xp: int = 0) -> Optional[CompletionResult]:
        """
        Mark a mission completed

        Returns:
            CompletionResult carrying the reward (xp_reward + bonus_xp), or
            None when the mission is unknown, already completed, or the daily
            set is still loading. None means nothing must be awarded.
        """
        if bonus_xp < 0:
            raise ValidationError("Bonus XP must be non-negative", field="bonus_xp", value=bonus_xp)

        for frequency, missions in self._sets.items():
            for index, mission in enumerate(missions):
                if mission.id != mission_id:
                    continue

                if mission.is_completed:
                    logger.info(f"Mission {mission_id} already completed, ignoring")
                    return None

                completed_at = self._clock()
                updated = list(missions)
                updated[index] = mission.mark_completed(completed_at)
                self._sets[frequency] = updated
                self._completed[frequency][mission_id] = completed_at

                daily_set_completed = (
                    frequency is MissionFrequency.DAILY
                    and all(m.is_completed for m in updated)
                )
                record_mission_completion(frequency.value)
                logger.info(
                    f"Completed {frequency.value} mission {mission_id}: "
                    f"+{mission.xp_reward} XP (+{bonus_xp} bonus)"
                )

                return CompletionResult(
                    mission_id=mission_id,
                    frequency=frequency,
                    xp_reward=mission.xp_reward,
                    bonus_xp=bonus_xp,
                    daily_set_completed=daily_set_completed,
                )

        if not self.is_ready:
            logger.warning(f"Cannot complete mission {mission_id}: daily missions still loading")
        else:
            logger.warning(f"Cannot complete mission {mission_id}: no such mission")
        return None

    def replace_set(self, frequency: MissionFrequency, missions: List[Mission]) -> None:
        """
        Swap the whole set for frequency

        Replacing the daily set also supersedes any generation in flight.
        """
        if frequency is MissionFrequency.DAILY:
            self._cycle += 1
            self.daily_status = StoreStatus.READY
        self._apply_set(frequency, missions)
        logger.info(f"Replaced {frequency.value} set with {len(missions)} missions")

    def restore(
        self,
        daily: List[Mission],
        weekly: List[Mission],
        daily_status: StoreStatus = StoreStatus.READY,
    ) -> None:
        """
        Rebuild both sets from a persisted snapshot

        A snapshot taken mid-load restores as an empty daily set whose reset
        time has already passed, so the next scheduler tick regenerates it.
        """
        now = self._clock()
        self._sets[MissionFrequency.WEEKLY] = list(weekly)
        self._set_reset_times[MissionFrequency.WEEKLY] = (
            weekly[0].reset_time if weekly else None
        )

        self.daily_status = StoreStatus.READY
        if daily_status is StoreStatus.LOADING:
            self._sets[MissionFrequency.DAILY] = []
            self._set_reset_times[MissionFrequency.DAILY] = now
        else:
            self._sets[MissionFrequency.DAILY] = list(daily)
            self._set_reset_times[MissionFrequency.DAILY] = (
                daily[0].reset_time if daily else next_reset_time(MissionFrequency.DAILY, now)
            )

        for frequency, missions in self._sets.items():
            self._completed[frequency] = {
                mission.id: mission.completed_at or now
                for mission in missions
                if mission.is_completed
            }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply_set(self, frequency: MissionFrequency, missions: List[Mission]) -> None:
        reset_time = next_reset_time(frequency, self._clock())
        if reset_time != self._set_reset_times[frequency]:
            self._completed[frequency] = {}

        # Rebuilding within the same cycle keeps earlier completions
        completed = self._completed[frequency]
        applied = []
        for mission in missions:
            mission = mission.model_copy(update={"frequency": frequency, "reset_time": reset_time})
            if mission.id in completed and not mission.is_completed:
                mission = mission.mark_completed(completed[mission.id])
            applied.append(mission)

        self._sets[frequency] = applied
        self._set_reset_times[frequency] = reset_time

    async def _generate(self, path: CharacterPath, count: int) -> List[Mission]:
        """Call the generator with a bounded timeout; any failure yields []"""
        try:
            missions = await call_with_timeout(
                self._generator.generate_initial_missions(path, count),
                self.generation_timeout,
                operation="load_initial",
            )
        except Exception as e:
            logger.warning(f"Mission generation failed, falling back to empty set: {e}")
            return []

        if not missions:
            logger.warning(f"Mission generator returned no missions for {path.value}")
            return []
        return list(missions)
