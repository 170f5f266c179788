"""
Audit Manager — daily per-site performance audit orchestration.

    GUARD → SETTINGS → PAGE URLS → AUDIT MATRIX → AGGREGATE → PERSIST → CLEANUP

schedule_daily_audits() enqueues one audit_site() job per site on RQ; the
worker runs the whole chain for that site. Audit failures of single jobs are
absorbed by the runner, persistence failures propagate and leave the audit
files in place for the next run.
"""
import logging
from typing import Optional

from perfaudit.config import AUDIT_DIR, AUDIT_WORKERS, PAGE_URL_DATE
from perfaudit.devices import get_list
from perfaudit.logging_config import audit_context
from perfaudit.pipeline.aggregator import MetricAggregator
from perfaudit.pipeline.base import AuditEngine
from perfaudit.pipeline.files import ResultFileStore
from perfaudit.pipeline.lighthouse import LighthouseConfig, LighthouseEngine
from perfaudit.pipeline.runner import AuditMatrixRunner
from perfaudit.services.db import ResultWriter, get_site_settings
from perfaudit.services.notifications import notify_audit_event, notify_site_audited
from perfaudit.services.reporting import ReportingApiClient
from perfaudit.services.task_guard import has_task_started_today, mark_task_as_started

logger = logging.getLogger('pipeline.manager')


# ── Lazy RQ queue (avoids import-time Redis connection) ──────────────────────

_queue = None

def _get_queue():
    global _queue
    if _queue is None:
        from perfaudit.extensions import redis_client
        from rq import Queue
        _queue = Queue('performance_audit', connection=redis_client)
    return _queue


# ── Public API ────────────────────────────────────────────────────────────────

def schedule_daily_audits(reporting: ReportingApiClient = None) -> list:
    """Enqueue one audit_site job per site. Returns the enqueued site ids."""
    reporting = reporting or ReportingApiClient()
    site_ids = reporting.get_site_ids()
    queue = _get_queue()
    for site_id in site_ids:
        queue.enqueue(audit_site, site_id, job_timeout=86400)
    logger.info("Scheduled performance audits for %d sites", len(site_ids))
    return site_ids


def audit_site(
    site_id: int,
    *,
    reporting: ReportingApiClient = None,
    engine: AuditEngine = None,
    store: ResultFileStore = None,
    writer: ResultWriter = None,
    max_workers: int = AUDIT_WORKERS,
) -> Optional[int]:
    """
    Run the performance audit of one site.

    Returns the number of stored rows, or None when the site was already
    audited today.
    """
    context = audit_context(site_id)
    if has_task_started_today(site_id):
        logger.info("Performance Audit task for site %d has been already started today",
                    site_id, extra=context)
        return None

    logger.info("Performance Audit task for site %d will be started now", site_id, extra=context)
    mark_task_as_started(site_id)

    settings = get_site_settings(site_id)
    reporting = reporting or ReportingApiClient()
    engine = engine or LighthouseEngine(LighthouseConfig.for_site(settings))
    store = store or ResultFileStore(AUDIT_DIR)
    writer = writer or ResultWriter()

    urls = reporting.get_page_urls(site_id, PAGE_URL_DATE)
    devices = get_list(settings.emulated_device)

    runner = AuditMatrixRunner(engine, store, max_workers=max_workers,
                               listeners=[notify_audit_event])
    runner.run(site_id, urls, devices, settings.run_count)

    file_count = store.count_for(site_id)
    logger.debug("Audit file count: %d", file_count, extra=context)

    rows = 0
    if file_count > 0:
        aggregated = MetricAggregator(store).aggregate(site_id)
        if aggregated:
            rows = writer.persist(site_id, aggregated)
        store.delete_all(site_id)
        notify_site_audited(site_id, file_count, rows)

    logger.info("Performance Audit task for site %d has finished", site_id, extra=context)
    return rows
