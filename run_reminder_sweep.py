"""
Reminder sweep runner
Run from cron or by hand: python run_reminder_sweep.py [--enqueue]

Without arguments the sweep runs in this process. With --enqueue it is handed
to the ARQ worker instead.
"""

import asyncio
import logging
import sys

from workshop.config import DATABASE_URL
from workshop.database import build_engine, build_session_factory
from workshop.domain.reminders.service import ReminderService
from workshop.worker import enqueue_reminder_sweep

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


async def run_sweep() -> dict:
    engine = build_engine(DATABASE_URL)
    db = build_session_factory(engine)()
    try:
        return await ReminderService(db).send_due_reminders()
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    try:
        if "--enqueue" in sys.argv[1:]:
            asyncio.run(enqueue_reminder_sweep())
        else:
            logger.info("🚀 Starting reminder sweep...")
            result = asyncio.run(run_sweep())
            logger.info(f"✅ {result['message']}")
    except KeyboardInterrupt:
        logger.info("👋 Reminder sweep stopped by user")
    except Exception as e:
        logger.error(f"❌ Reminder sweep failed: {e}")
        sys.exit(1)
