"""
Mission Reset Scheduler

Background task that expires mission sets. Every interval it checks the
daily and weekly sets of the mission store:

- daily set expired: discard it and request a fresh set from the generator
- weekly set expired: rebuild it from the weekly mission table (no network)

The scheduler is inert while no character path is selected. It only calls
MissionStore operations and never touches user progress.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from mission_engine.config import DAILY_MISSION_COUNT, MISSION_RESET_CHECK_INTERVAL
from mission_engine.missions.catalog import build_weekly_missions
from mission_engine.missions.store import MissionStore
from mission_engine.models.mission import CharacterPath, MissionFrequency
from mission_engine.resilience import record_mission_reset
from mission_engine.utils.datetime_helpers import now_utc

logger = logging.getLogger(__name__)


class ResetScheduler:
    """
    Periodic reset check for one mission store.

    Runs on the event loop like any other task, decoupled from whoever
    displays the missions.
    """

    def __init__(
        self,
        store: MissionStore,
        path_provider: Callable[[], Optional[CharacterPath]],
        interval: float = MISSION_RESET_CHECK_INTERVAL,
        daily_count: int = DAILY_MISSION_COUNT,
        clock: Callable[[], datetime] = now_utc,
    ):
        """
        Args:
            store: Mission store to reset
            path_provider: Returns the selected character path, or None
            interval: Seconds between checks
            daily_count: Number of daily missions to request on reset
            clock: Returns the current aware datetime
        """
        self.store = store
        self._path_provider = path_provider
        self.interval = interval
        self.daily_count = daily_count
        self._clock = clock
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the background reset loop."""
        if self._running:
            logger.warning("Reset scheduler is already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._reset_loop())
        logger.info(f"Reset scheduler started (interval: {self.interval}s)")

    async def stop(self) -> None:
        """Stop the background reset loop."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Reset scheduler stopped")

    async def _reset_loop(self) -> None:
        """Main loop: wait one interval, then check."""
        while self._running:
            await asyncio.sleep(self.interval)
            try:
                await self.tick()
            except Exception as e:
                logger.error(f"Error during mission reset check: {e}", exc_info=True)

    async def tick(self) -> Dict[str, bool]:
        """
        Run one reset check

        Returns:
            {'daily_reset': bool, 'weekly_reset': bool}
        """
        result = {"daily_reset": False, "weekly_reset": False}

        path = self._path_provider()
        if path is None:
            logger.debug("No character path selected, skipping reset check")
            return result

        now = self._clock()
        daily_due = self.store.needs_reset(MissionFrequency.DAILY, now)
        weekly_due = self.store.needs_reset(MissionFrequency.WEEKLY, now)

        if daily_due:
            logger.info("Daily missions expired, requesting a fresh set")
            record_mission_reset(MissionFrequency.DAILY.value)
            result["daily_reset"] = True
            await self.store.load_initial(path, self.daily_count)

        if weekly_due:
            logger.info(f"Weekly missions expired, rebuilding {path.value} weekly set")
            record_mission_reset(MissionFrequency.WEEKLY.value)
            self.store.replace_set(MissionFrequency.WEEKLY, build_weekly_missions(path, self._clock()))
            result["weekly_reset"] = True

        return result
