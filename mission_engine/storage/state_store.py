"""JSON snapshots of dashboard sessions

One file per user under DATA_PATH/<user_id>/engine_state.json. Writes go to a
temporary file first and are moved into place, so a crash mid-write leaves the
previous snapshot intact.
"""
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from mission_engine.config import DATA_PATH
from mission_engine.exceptions import StorageError
from mission_engine.models.state import EngineState

logger = logging.getLogger(__name__)

STATE_FILENAME = "engine_state.json"


class StateStore:
    """Load/save EngineState snapshots"""

    def __init__(self, data_path: Path = DATA_PATH):
        self.data_path = data_path

    def get_state_path(self, user_id: str) -> Path:
        return self.data_path / user_id / STATE_FILENAME

    async def save(self, user_id: str, state: EngineState) -> None:
        """Write a snapshot for user_id"""
        path = self.get_state_path(user_id)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(state.model_dump_json(indent=2), encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            raise StorageError(
                f"Failed to save engine state: {e}",
                path=str(path),
                user_id=user_id,
                operation="save_state",
                cause=e
            )
        logger.info(f"Saved engine state for user {user_id}")

    async def load(self, user_id: str) -> Optional[EngineState]:
        """Read the snapshot for user_id; None if there is none yet"""
        path = self.get_state_path(user_id)
        if not path.exists():
            logger.info(f"No saved engine state for user {user_id}")
            return None

        try:
            return EngineState.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, PydanticValidationError) as e:
            raise StorageError(
                f"Failed to load engine state: {e}",
                path=str(path),
                user_id=user_id,
                operation="load_state",
                cause=e
            )
