"""Fixed weekly missions per character path

Weekly sets never hit the network: on reset they are rebuilt from this table.
Mission ids embed the reset date so each cycle gets fresh ids.
"""

from datetime import datetime
from typing import Dict, List, Tuple

from mission_engine.models.mission import CharacterPath, Mission, MissionFrequency
from mission_engine.utils.datetime_helpers import next_reset_time

# (key, title, description, xp_reward)
WEEKLY_MISSIONS: Dict[CharacterPath, List[Tuple[str, str, str, int]]] = {
    CharacterPath.NARUTO: [
        ("training_arc", "Training Arc", "Work out on at least 4 days this week", 150),
        ("never_give_up", "Never Give Up", "Finish a task you have been putting off", 120),
        ("bonds", "Bonds of Friendship", "Reach out to two friends you haven't talked to lately", 100),
    ],
    CharacterPath.SASUKE: [
        ("sharpen_focus", "Sharpen Your Focus", "Complete five deep-work sessions of 45 minutes", 150),
        ("master_technique", "Master a Technique", "Spend three hours practising one skill", 130),
        ("discipline", "Discipline of the Uchiha", "Wake up at the same time every day this week", 100),
    ],
    CharacterPath.SAKURA: [
        ("healing_hands", "Healing Hands", "Get seven hours of sleep on five nights", 140),
        ("inner_strength", "Inner Strength", "Journal about your progress three times", 110),
        ("medical_study", "Medical Ninja Study", "Read or study for a total of three hours", 120),
    ],
}


def build_weekly_missions(path: CharacterPath, now: datetime) -> List[Mission]:
    """Fresh weekly set for path, all sharing the next weekly reset time"""
    reset_time = next_reset_time(MissionFrequency.WEEKLY, now)
    cycle = reset_time.date().isoformat()
    return [
        Mission(
            id=f"weekly-{path.value}-{key}-{cycle}",
            title=title,
            description=description,
            xp_reward=xp_reward,
            frequency=MissionFrequency.WEEKLY,
            reset_time=reset_time,
        )
        for key, title, description, xp_reward in WEEKLY_MISSIONS[path]
    ]
