"""Tests for perfaudit.services.actions — SHA-1 keyed page URL lookups."""
import hashlib

import pytest
from unittest.mock import MagicMock

from perfaudit.models.log_action import LogAction, TYPE_PAGE_URL
from perfaudit.pipeline.files import url_hash
from perfaudit.services.actions import ActionResolver, sha1_hex

TYPE_PAGE_TITLE = 4


@pytest.fixture
def catalogue(db_session):
    """A few host actions: page URLs stored without scheme/www, plus noise."""
    db_session.add_all([
        LogAction(idaction=10, name='a.com/x', type=TYPE_PAGE_URL, url_prefix=3),
        LogAction(idaction=11, name='a.com/y', type=TYPE_PAGE_URL, url_prefix=2),
        LogAction(idaction=12, name='a.com/x', type=TYPE_PAGE_TITLE),
        LogAction(idaction=13, name='http://www.b.com/raw', type=TYPE_PAGE_URL),
    ])
    db_session.commit()
    return db_session


class TestLookupTable:

    def test_maps_hash_to_id(self, catalogue, session_factory):
        resolver = ActionResolver(session_factory)
        table = resolver.lookup_table([url_hash('https://www.a.com/x'), url_hash('http://a.com/y')])
        assert table == {
            url_hash('https://www.a.com/x'): 10,
            url_hash('http://a.com/y'): 11,
        }

    def test_only_page_url_actions(self, catalogue, session_factory):
        table = ActionResolver(session_factory).lookup_table([sha1_hex('a.com/x')])
        assert list(table.values()) == [10]

    def test_unknown_hashes_are_absent(self, catalogue, session_factory):
        table = ActionResolver(session_factory).lookup_table([sha1_hex('nope.com/'), sha1_hex('a.com/y')])
        assert table == {sha1_hex('a.com/y'): 11}

    def test_url_type(self, catalogue, session_factory):
        table = ActionResolver(session_factory).lookup_table([sha1_hex('a.com/x')], 'url')
        assert table == {sha1_hex('a.com/x'): 'a.com/x'}

    def test_url_prefix_type(self, catalogue, session_factory):
        table = ActionResolver(session_factory).lookup_table([sha1_hex('a.com/y')], 'url_prefix')
        assert table == {sha1_hex('a.com/y'): 2}

    def test_invalid_type_raises(self):
        factory = MagicMock()
        with pytest.raises(ValueError, match='invalid value'):
            ActionResolver(factory).lookup_table([sha1_hex('a.com/x')], 'name')
        factory.assert_not_called()

    def test_empty_input_skips_query(self):
        factory = MagicMock()
        assert ActionResolver(factory).lookup_table([]) == {}
        factory.assert_not_called()


class TestResolve:

    def test_hashes_raw_url(self, catalogue, session_factory):
        table = ActionResolver(session_factory).resolve(['http://www.b.com/raw'])
        assert table == {hashlib.sha1(b'http://www.b.com/raw').hexdigest(): 13}

    def test_raw_urls_are_not_canonicalized(self, catalogue, session_factory):
        """Same file key hash, but two distinct catalogue lookups."""
        urls = ['http://www.b.com/raw', 'https://b.com/raw']
        assert url_hash(urls[0]) == url_hash(urls[1])

        table = ActionResolver(session_factory).resolve(urls)
        assert table == {sha1_hex('http://www.b.com/raw'): 13}
        assert sha1_hex('https://b.com/raw') not in table

    def test_canonical_name_not_found_by_full_url(self, catalogue, session_factory):
        assert ActionResolver(session_factory).resolve(['https://www.a.com/x']) == {}
