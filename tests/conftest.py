"""Global test fixtures and utilities for mission-engine tests"""
import pytest
import asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from mission_engine.models.mission import CharacterPath, Mission, MissionFrequency
from mission_engine.resilience import MISSION_GENERATOR_BREAKER


# ============================================================================
# Time Fixtures
# ============================================================================

class FakeClock:
    """Settable clock; call it to get the current time"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def frozen_time():
    """Wednesday noon UTC, far from any reset boundary"""
    return datetime(2024, 1, 17, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(frozen_time):
    return FakeClock(frozen_time)


# ============================================================================
# Generator Fixtures
# ============================================================================

class FakeGenerator:
    """
    In-memory mission generator.

    Returns `count` missions per call unless told to fail, hang or return
    nothing. `gate` holds daily loads in flight until it is set; `ai_gate`
    does the same for single AI missions.
    """

    def __init__(self, clock, xp_reward: int = 50):
        self.clock = clock
        self.xp_reward = xp_reward
        self.calls = 0
        self.fail = False
        self.empty = False
        self.hang = False
        self.gate: Optional[asyncio.Event] = None
        self.ai_gate: Optional[asyncio.Event] = None
        self.ai_mission_result: Optional[Mission] = None

    def make_mission(self, title: str) -> Mission:
        return Mission(
            title=title,
            description=f"{title} description",
            xp_reward=self.xp_reward,
            frequency=MissionFrequency.DAILY,
            reset_time=self.clock() + timedelta(hours=6),
        )

    async def generate_initial_missions(self, path: CharacterPath, count: int) -> List[Mission]:
        self.calls += 1
        call_number = self.calls
        if self.gate is not None:
            await self.gate.wait()
        if self.hang:
            await asyncio.sleep(3600)
        if self.fail:
            raise RuntimeError("generator unavailable")
        if self.empty:
            return []
        return [self.make_mission(f"{path.value} mission {call_number}.{i}") for i in range(count)]

    async def generate_ai_mission(self, path: CharacterPath) -> Optional[Mission]:
        self.calls += 1
        if self.ai_gate is not None:
            await self.ai_gate.wait()
        if self.hang:
            await asyncio.sleep(3600)
        if self.fail:
            return None
        return self.ai_mission_result or self.make_mission(f"{path.value} bonus mission")


@pytest.fixture
def fake_generator(clock):
    return FakeGenerator(clock)


# ============================================================================
# Resilience Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def reset_circuit_breaker():
    """Every test starts with a closed generator breaker"""
    MISSION_GENERATOR_BREAKER.close()
    yield
    MISSION_GENERATOR_BREAKER.close()


# ============================================================================
# Mission Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "123456789"


@pytest.fixture
def mission_factory(clock):
    """Build missions relative to the test clock"""

    def _make(
        title: str = "Test mission",
        xp_reward: int = 50,
        frequency: MissionFrequency = MissionFrequency.DAILY,
        reset_in: timedelta = timedelta(hours=6),
        **kwargs
    ) -> Mission:
        return Mission(
            title=title,
            xp_reward=xp_reward,
            frequency=frequency,
            reset_time=clock() + reset_in,
            **kwargs
        )

    return _make
