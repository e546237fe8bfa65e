"""Main entry point for the mission engine"""
import logging
import asyncio
from typing import Optional

from mission_engine.config import (
    validate_config,
    LOG_LEVEL,
    ENGINE_USER_ID,
    OPENAI_API_KEY,
    MISSION_RESET_CHECK_INTERVAL,
)
from mission_engine.exceptions import StorageError
from mission_engine.missions import OpenAIMissionGenerator
from mission_engine.monitoring import init_sentry, set_user_context
from mission_engine.scheduler.reset_scheduler import ResetScheduler
from mission_engine.services import DashboardService
from mission_engine.storage import StateStore

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL)
)

logger = logging.getLogger(__name__)


async def main() -> None:
    """Main application entry point"""
    store = StateStore()
    service: Optional[DashboardService] = None
    scheduler: Optional[ResetScheduler] = None
    try:
        # Validate configuration
        logger.info("Validating configuration...")
        validate_config()
        init_sentry()
        set_user_context(ENGINE_USER_ID)

        if not OPENAI_API_KEY:
            logger.warning("OPENAI_API_KEY not set, daily missions will stay empty")

        # Restore last session
        logger.info(f"Loading engine state for {ENGINE_USER_ID}...")
        try:
            state = await store.load(ENGINE_USER_ID)
        except StorageError:
            logger.warning("Saved engine state unreadable, starting fresh")
            state = None

        service = DashboardService(OpenAIMissionGenerator(), state=state)

        # Start reset checks
        scheduler = service.create_scheduler(interval=MISSION_RESET_CHECK_INTERVAL)
        await scheduler.start()
        await scheduler.tick()

        logger.info("Mission engine is running. Press Ctrl+C to stop.")
        await asyncio.Event().wait()

    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
    finally:
        if scheduler:
            logger.info("Stopping reset scheduler...")
            await scheduler.stop()

        if service:
            logger.info("Saving engine state...")
            try:
                await store.save(ENGINE_USER_ID, service.snapshot())
            except StorageError as e:
                logger.error(f"Could not save engine state: {e}")

        logger.info("Shutdown complete")


def run() -> None:
    """Console script entry point"""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
