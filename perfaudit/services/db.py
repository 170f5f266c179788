"""
Persistence helpers — site settings and aggregated audit results.

Unlike best-effort bookkeeping, a failed write here is fatal to the site's
run: errors are rolled back and re-raised so the audit files stay on disk
for the next attempt.
"""
import logging
from datetime import date, datetime, time
from typing import Callable

from perfaudit.database import get_session
from perfaudit.devices import get_id_for
from perfaudit.models.log_performance import LogPerformance
from perfaudit.models.site_settings import SiteSettings
from perfaudit.services.actions import ActionResolver

logger = logging.getLogger('services.db')


def get_site_settings(site_id: int, session_factory: Callable = get_session) -> SiteSettings:
    """Stored settings of a site, or the defaults when it has none."""
    session = session_factory()
    try:
        settings = session.get(SiteSettings, site_id)
        if settings is not None:
            session.expunge(settings)
            return settings
    finally:
        session.close()
    return SiteSettings.defaults(site_id)


class ResultWriter:
    """Writes one log_performance row per (site, device, action, metric)."""

    def __init__(self, resolver: ActionResolver = None, session_factory: Callable = get_session):
        self.resolver = resolver or ActionResolver(session_factory)
        self.session_factory = session_factory

    def persist(self, site_id: int, aggregated: dict) -> int:
        """
        Store the aggregated statistics of one site.

        URLs without a page URL action are dropped silently (inner join).
        Returns the number of rows inserted.
        """
        if site_id not in aggregated:
            logger.warning("Results for database storage is either empty or site results is not available")
            return 0

        site_result = aggregated[site_id]
        action_ids = self.resolver.lookup_table(site_result.keys(), 'id')
        created_at = datetime.combine(date.today(), time.min)

        rows_inserted = 0
        session = self.session_factory()
        try:
            for url, devices in site_result.items():
                action_id = action_ids.get(url)
                if action_id is None:
                    logger.debug("No page URL action for %s — skipping", url)
                    continue
                for device, metrics in devices.items():
                    device_id = get_id_for(device)
                    for key, (min_value, median_value, max_value) in metrics.items():
                        session.add(LogPerformance(
                            idsite=site_id,
                            emulated_device=device_id,
                            idaction=action_id,
                            key=key,
                            min=min_value,
                            median=median_value,
                            max=max_value,
                            created_at=created_at,
                        ))
                        session.commit()
                        rows_inserted += 1
        except Exception:
            session.rollback()
            logger.error("Failed to store audit results of site %d after %d rows",
                         site_id, rows_inserted, exc_info=True)
            raise
        finally:
            session.close()

        logger.debug("Stored %d entries in database", rows_inserted)
        return rows_inserted
