"""
Audit matrix runner — one engine call per (url, device, run).

A failing audit is logged and skipped; the rest of the matrix still runs.
With max_workers > 1 the jobs are spread over a thread pool, failure isolation
stays the same.
"""
import itertools
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Sequence

from perfaudit.logging_config import audit_context
from perfaudit.pipeline.base import AuditEngine, AuditFailedError, AuditJob, MatrixResult
from perfaudit.pipeline.files import ResultFileStore, ResultKey

logger = logging.getLogger('pipeline.runner')

EVENT_START = 'performance.audit'
EVENT_END = 'performance.audit.end'

# listener(event, site_id, urls, devices, run_count)
Listener = Callable[[str, int, List[str], List[str], int], None]


class AuditMatrixRunner:

    def __init__(self, engine: AuditEngine, store: ResultFileStore,
                 max_workers: int = 1, listeners: Sequence[Listener] = ()):
        self.engine = engine
        self.store = store
        self.max_workers = max(1, max_workers)
        self.listeners = list(listeners)

    @staticmethod
    def jobs(site_id: int, urls: List[str], devices: List[str], run_count: int) -> List[AuditJob]:
        """Cartesian product urls × devices × 1..run_count, in that nesting order."""
        return [
            AuditJob(site_id, url, device, run)
            for url, device, run in itertools.product(urls, devices, range(1, run_count + 1))
        ]

    def run(self, site_id: int, urls: List[str], devices: List[str], run_count: int) -> MatrixResult:
        self._emit(EVENT_START, site_id, urls, devices, run_count)
        logger.debug("Performing audit for site %d: %d URLs, devices=%s, runs=%d",
                     site_id, len(urls), devices, run_count)

        self.store.ensure_directory()
        jobs = self.jobs(site_id, urls, devices, run_count)
        result = MatrixResult(jobs=len(jobs))

        if self.max_workers == 1:
            for job in jobs:
                self._record(result, self._run_job(job, run_count))
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [pool.submit(self._run_job, job, run_count) for job in jobs]
                for future in as_completed(futures):
                    self._record(result, future.result())

        logger.info("Audit matrix for site %d done — %d/%d completed, %d failed",
                    site_id, result.completed, result.jobs, result.failed,
                    extra=audit_context(site_id))
        self._emit(EVENT_END, site_id, urls, devices, run_count)
        return result

    def _run_job(self, job: AuditJob, run_count: int):
        """Returns None on success, the error message on failure."""
        context = audit_context(job.site_id, job.device, job.run, job.url)
        logger.info("Performing scheduled audit [%d/%d] of site %d (device: %s) for URL: %s",
                    job.run, run_count, job.site_id, job.device, job.url, extra=context)
        try:
            self.engine.audit(job.url, job.device, self.store.path_for(ResultKey.for_job(job)))
        except AuditFailedError as e:
            logger.warning("Audit failed for %s (%s, run %d): %s", job.url, job.device, job.run, e,
                           extra=context)
            return str(e)
        return None

    @staticmethod
    def _record(result: MatrixResult, error):
        if error is None:
            result.completed += 1
        else:
            result.failed += 1
            result.errors.append(error)

    def _emit(self, event, site_id, urls, devices, run_count):
        for listener in self.listeners:
            try:
                listener(event, site_id, urls, devices, run_count)
            except Exception:
                logger.error("Listener for '%s' failed", event, exc_info=True)
