"""
Mission generator adapter

MissionGenerator is the contract the mission store and dashboard call to get
new mission content. OpenAIMissionGenerator implements it against an
OpenAI-compatible chat-completions endpoint, behind the mission_generator
circuit breaker and retry-with-backoff.

Failure contract:
- generate_initial_missions raises (MissionEngineError subclasses)
- generate_ai_mission returns None
"""

import asyncio
import json
import logging
import re
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, TypeVar

import httpx

from mission_engine.config import MISSION_MODEL, OPENAI_API_KEY, OPENAI_BASE_URL
from mission_engine.exceptions import (
    GenerationTimeoutError,
    MissionEngineError,
    MissionGenerationError,
    wrap_external_exception,
)
from mission_engine.models.mission import CharacterPath, Mission, MissionFrequency
from mission_engine.resilience import (
    MISSION_GENERATOR_BREAKER,
    record_api_call,
    retry_with_backoff,
    with_circuit_breaker,
)
from mission_engine.utils.datetime_helpers import next_reset_time, now_utc

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_XP_REWARD = 50
MAX_XP_REWARD = 200
REQUEST_TIMEOUT = httpx.Timeout(15.0, connect=5.0)


class MissionGenerator(Protocol):
    """Source of mission content"""

    async def generate_initial_missions(self, path: CharacterPath, count: int) -> List[Mission]:
        ...

    async def generate_ai_mission(self, path: CharacterPath) -> Optional[Mission]:
        ...


PATH_THEMES: Dict[CharacterPath, str] = {
    CharacterPath.NARUTO: "perseverance, physical training and never giving up",
    CharacterPath.SASUKE: "discipline, focus and relentless self-improvement",
    CharacterPath.SAKURA: "knowledge, self-care and inner strength",
}

SYSTEM_PROMPT = """You design short real-life self-improvement missions themed around a ninja path.
Each mission must be doable today in under an hour, concrete and measurable.

Reply with JSON only (no markdown, no ```):
[
  {"title": "Short mission name", "description": "One sentence on what to do", "xp_reward": 10-100},
  ...
]"""

MISSIONS_PROMPT = "Create {count} daily missions for the {path} path. Theme: {theme}."


async def call_with_timeout(awaitable: Awaitable[T], timeout: float, operation: str) -> T:
    """Await a generator call, raising GenerationTimeoutError after timeout seconds"""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        raise GenerationTimeoutError(timeout, operation=operation, cause=e)


def parse_mission_payload(content: str) -> List[Dict[str, Any]]:
    """
    Parse the model's reply into mission dicts

    Accepts a bare JSON array or an object with a "missions" array, optionally
    wrapped in a markdown code fence.

    Raises:
        ValueError: content is not a list of objects with a title
    """
    cleaned = re.sub(r"^```(?:json)?\s*|\s*```$", "", content.strip())
    payload = json.loads(cleaned)

    if isinstance(payload, dict):
        payload = payload.get("missions")
    if not isinstance(payload, list):
        raise ValueError("Expected a JSON array of missions")

    items = []
    for item in payload:
        if not isinstance(item, dict) or not str(item.get("title", "")).strip():
            raise ValueError(f"Mission without a title: {item!r}")
        items.append(item)
    return items


def _coerce_reward(value: Any) -> int:
    try:
        reward = int(value)
    except (TypeError, ValueError):
        return DEFAULT_XP_REWARD
    return min(max(reward, 0), MAX_XP_REWARD)


class OpenAIMissionGenerator:
    """
    Mission generator backed by an OpenAI-compatible chat API.

    Args:
        api_key: Bearer token; generation fails fast without one
        model: Chat model name
        base_url: API root, e.g. https://api.openai.com/v1
        client: Optional shared httpx.AsyncClient (a short-lived one is used otherwise)
        clock: Returns the current aware datetime; used for reset times
    """

    def __init__(
        self,
        api_key: str = OPENAI_API_KEY,
        model: str = MISSION_MODEL,
        base_url: str = OPENAI_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self._client = client
        self._clock = clock

    async def generate_initial_missions(self, path: CharacterPath, count: int) -> List[Mission]:
        """Generate count daily missions for path (may return fewer)"""
        if not self.api_key:
            raise MissionGenerationError(
                "OPENAI_API_KEY not configured",
                operation="generate_initial_missions"
            )

        start = time.monotonic()
        try:
            items = await self._request_missions(path, count)
        except Exception as e:
            record_api_call("mission_generator", success=False, duration=time.monotonic() - start)
            raise wrap_external_exception(e, operation="generate_initial_missions")

        record_api_call("mission_generator", success=True, duration=time.monotonic() - start)

        now = self._clock()
        reset_time = next_reset_time(MissionFrequency.DAILY, now)
        missions = [
            Mission(
                title=str(item["title"]).strip(),
                description=str(item.get("description", "")).strip(),
                xp_reward=_coerce_reward(item.get("xp_reward")),
                frequency=MissionFrequency.DAILY,
                reset_time=reset_time,
            )
            for item in items[:count]
        ]
        logger.info(f"Generated {len(missions)} missions for path {path.value}")
        return missions

    async def generate_ai_mission(self, path: CharacterPath) -> Optional[Mission]:
        """Generate a single extra daily mission; None on any failure"""
        try:
            missions = await self.generate_initial_missions(path, 1)
        except MissionEngineError as e:
            logger.warning(f"AI mission generation failed for {path.value}: {e.message}")
            return None
        return missions[0] if missions else None

    @with_circuit_breaker(MISSION_GENERATOR_BREAKER)
    async def _request_missions(self, path: CharacterPath, count: int) -> List[Dict[str, Any]]:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": MISSIONS_PROMPT.format(
                    count=count, path=path.value.capitalize(), theme=PATH_THEMES[path]
                ),
            },
        ]
        content = await retry_with_backoff(self._post_chat_completion, messages)
        return parse_mission_payload(content)

    async def _post_chat_completion(self, messages: List[Dict[str, str]]) -> str:
        payload = {"model": self.model, "messages": messages, "temperature": 0.8}
        headers = {"Authorization": f"Bearer {self.api_key}"}
        url = f"{self.base_url}/chat/completions"

        if self._client is not None:
            response = await self._client.post(url, json=payload, headers=headers, timeout=REQUEST_TIMEOUT)
        else:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
                response = await client.post(url, json=payload, headers=headers)

        response.raise_for_status()
        return response.json()["choices"][0]["message"]["content"]
