"""
Daily guard — a site is audited at most once per day.

The day a site's audit last started is kept in Redis under
perfaudit:last_run:{site_id}.
"""
import logging
from datetime import date

logger = logging.getLogger('services.task_guard')

KEY_TTL = 86400 * 2  # 2 days


def _redis():
    from perfaudit.extensions import redis_client
    return redis_client


def last_run_key(site_id: int) -> str:
    return f'perfaudit:last_run:{site_id}'


def has_task_started_today(site_id: int) -> bool:
    return _redis().get(last_run_key(site_id)) == date.today().isoformat()


def mark_task_as_started(site_id: int) -> None:
    logger.debug("Mark task for site %d as started", site_id)
    _redis().setex(last_run_key(site_id), KEY_TTL, date.today().isoformat())
