"""
Lifespan worker: one-off housekeeping, then the notification queue.
"""

from elmadrasa.config import logger
from elmadrasa.services.metrics import cleanup_old_metrics
from elmadrasa.services.task_worker import task_queue


async def run_background_worker():
    """Runs until cancelled on shutdown"""
    await cleanup_old_metrics()
    try:
        await task_queue.worker_loop()
    except Exception as e:
        logger.error(f"Task worker stopped unexpectedly: {e}", exc_info=True)
