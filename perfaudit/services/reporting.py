"""
Matomo reporting API client — page URLs and site ids.

Only the two report calls the audit needs; everything goes through
index.php?module=API with format=json.
"""
import logging
from typing import List

import requests

from perfaudit.config import MATOMO_URL, MATOMO_TOKEN_AUTH, PAGE_URL_DATE

logger = logging.getLogger('services.reporting')


class ReportingApiError(Exception):
    """The reporting API answered with result=error."""


class ReportingApiClient:

    def __init__(self, base_url: str = MATOMO_URL, token_auth: str = MATOMO_TOKEN_AUTH,
                 timeout: int = 60, session: requests.Session = None):
        self.base_url = base_url.rstrip('/')
        self.token_auth = token_auth
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, **params):
        data = {'module': 'API', 'method': method, 'format': 'json', **params}
        if self.token_auth:
            data['token_auth'] = self.token_auth
        response = self.session.post(f'{self.base_url}/index.php', data=data, timeout=self.timeout)
        response.raise_for_status()
        payload = response.json()
        if isinstance(payload, dict) and payload.get('result') == 'error':
            raise ReportingApiError(f"{method}: {payload.get('message', 'unknown error')}")
        return payload

    def get_page_urls(self, site_id: int, date: str = PAGE_URL_DATE) -> List[str]:
        """Unique http(s) page URLs tracked for the site, in report order."""
        payload = self._request(
            'Actions.getPageUrls',
            idSite=site_id,
            date=date,
            period='day',
            expanded=0,
            flat=1,
            enable_filter_excludelowpop=0,
            include_aggregate_rows=0,
            keep_totals_row=0,
            filter_limit=-1,
            disable_generic_filters=1,
        )
        # A date range answers {date: [rows]}, a single date answers [rows]
        tables = payload.values() if isinstance(payload, dict) else [payload]

        urls = []
        seen = set()
        for rows in tables:
            for row in rows or []:
                url = row.get('url') or ''
                if url.startswith('http') and url not in seen:
                    seen.add(url)
                    urls.append(url)
        logger.debug("Site %d has %d page URLs for %s", site_id, len(urls), date)
        return urls

    def get_site_ids(self) -> List[int]:
        return [int(site_id) for site_id in self._request('SitesManager.getAllSitesId')]
