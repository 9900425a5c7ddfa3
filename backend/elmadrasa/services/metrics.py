"""
Request metrics stored in the api_metrics collection.
"""

from datetime import datetime, timezone, timedelta
from typing import Optional

from elmadrasa.database import db
from elmadrasa.config import logger

METRICS_RETENTION_DAYS = 365


async def log_api_metric(endpoint: str, method: str, response_time_ms: int,
                         status_code: int, error_type: Optional[str] = None,
                         user_id: Optional[str] = None):
    """Best-effort insert; a metrics outage must not affect requests"""
    metric = {
        "endpoint": endpoint,
        "method": method,
        "status_code": status_code,
        "response_time_ms": response_time_ms,
        "error_type": error_type,
        "user_id": user_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    try:
        await db.api_metrics.insert_one(metric)
    except Exception as e:
        logger.error(f"Could not store metric for {method} {endpoint}: {e}")


async def cleanup_old_metrics(retention_days: int = METRICS_RETENTION_DAYS) -> int:
    """Drop metrics older than the retention window; returns how many went"""
    cutoff = (datetime.now(timezone.utc) - timedelta(days=retention_days)).isoformat()
    try:
        result = await db.api_metrics.delete_many({"timestamp": {"$lt": cutoff}})
    except Exception as e:
        logger.error(f"Metrics cleanup failed: {e}", exc_info=True)
        return 0
    logger.info(f"Removed {result.deleted_count} api_metrics older than {retention_days} days")
    return result.deleted_count
