"""
Action lookups — map URLs to the host's page URL action ids.

The join key is SHA-1 of the raw catalogue name. Result files are keyed by
SHA-1 of the URL without scheme and "www.", which is exactly how the host
stores page URL names, so those hashes can be looked up directly. resolve()
on the other hand hashes the URLs it is given verbatim: "http://www.a.com/x"
and "https://a.com/x" are two different lookups there.
"""
import hashlib
import logging
from typing import Callable, Dict, Iterable

from sqlalchemy import func, select

from perfaudit.database import get_session
from perfaudit.models.log_action import LogAction, TYPE_PAGE_URL

logger = logging.getLogger('services.actions')

LOOKUP_TYPES = ('id', 'url', 'url_prefix')


def sha1_hex(value: str) -> str:
    return hashlib.sha1(value.encode('utf-8')).hexdigest()


class ActionResolver:

    def __init__(self, session_factory: Callable = get_session):
        self.session_factory = session_factory

    def lookup_table(self, url_hashes: Iterable[str], type: str = 'id') -> Dict[str, object]:
        """
        One query for all hashes: {sha1(name): id | url | url_prefix}.

        Hashes without a page URL action are absent from the result.
        """
        if type not in LOOKUP_TYPES:
            raise ValueError(f"{type} is invalid value for action lookup table.")

        hashes = sorted(set(url_hashes))
        if not hashes:
            return {}

        name_hash = func.sha1(LogAction.name)
        stmt = select(
            LogAction.idaction.label('id'),
            LogAction.name.label('url'),
            LogAction.url_prefix.label('url_prefix'),
            name_hash.label('hash'),
        ).where(
            LogAction.type == TYPE_PAGE_URL,
            name_hash.in_(hashes),
        )

        session = self.session_factory()
        try:
            rows = session.execute(stmt).mappings().all()
        finally:
            session.close()

        table = {row['hash']: row[type] for row in rows}
        logger.debug("Action lookup table: %d of %d hashes matched", len(table), len(hashes))
        return table

    def resolve(self, urls: Iterable[str], type: str = 'id') -> Dict[str, object]:
        """Look up raw URLs; keys of the result are sha1(url)."""
        return self.lookup_table([sha1_hex(url) for url in urls], type)
