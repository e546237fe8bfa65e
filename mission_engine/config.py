"""Configuration management"""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Mission generator (OpenAI-compatible chat completions endpoint)
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
MISSION_MODEL: str = os.getenv("MISSION_MODEL", "gpt-4o-mini")

# Seconds before a single generation request is abandoned and treated as a failure
MISSION_GENERATION_TIMEOUT: float = float(os.getenv("MISSION_GENERATION_TIMEOUT", "20"))

# Missions
DAILY_MISSION_COUNT: int = int(os.getenv("DAILY_MISSION_COUNT", "3"))
MISSION_RESET_CHECK_INTERVAL: int = int(os.getenv("MISSION_RESET_CHECK_INTERVAL", "60"))

# IANA timezone used to place the daily/weekly reset boundaries
RESET_TIMEZONE: str = os.getenv("RESET_TIMEZONE", "UTC")

# Storage
ENGINE_USER_ID: str = os.getenv("ENGINE_USER_ID", "default")
DATA_PATH: Path = Path(os.getenv("DATA_PATH", "./data"))

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Sentry
ENABLE_SENTRY: bool = os.getenv("ENABLE_SENTRY", "false").lower() == "true"
SENTRY_DSN: str = os.getenv("SENTRY_DSN", "")
SENTRY_ENVIRONMENT: str = os.getenv("SENTRY_ENVIRONMENT", "development")
SENTRY_TRACES_SAMPLE_RATE: float = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1"))


# Validation
def validate_config() -> None:
    """Validate required configuration"""
    if DAILY_MISSION_COUNT < 1:
        raise ValueError("DAILY_MISSION_COUNT must be at least 1")
    if MISSION_RESET_CHECK_INTERVAL < 1:
        raise ValueError("MISSION_RESET_CHECK_INTERVAL must be at least 1 second")
    if MISSION_GENERATION_TIMEOUT <= 0:
        raise ValueError("MISSION_GENERATION_TIMEOUT must be positive")
    # OPENAI_API_KEY is optional: without it generation degrades to empty mission sets
