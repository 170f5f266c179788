"""Shared test fixtures."""
import json

import pytest
from unittest.mock import patch, MagicMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from perfaudit import load_models
from perfaudit.database import Base, register_sqlite_functions
from perfaudit.pipeline.base import AuditEngine, AuditFailedError
from perfaudit.pipeline.files import ResultFileStore


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created and SHA1() available."""
    engine = register_sqlite_functions(create_engine('sqlite:///:memory:'))
    load_models()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Session factory bound to the in-memory engine — pass wherever get_session is expected."""
    return sessionmaker(bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    """Session for arranging and asserting test data."""
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def mock_redis():
    """Mock Redis client. Returns a MagicMock with common Redis methods."""
    mock = MagicMock()
    mock.get.return_value = None
    mock.setex.return_value = True
    with patch('perfaudit.extensions.redis_client', mock):
        yield mock


@pytest.fixture
def store(tmp_path):
    """ResultFileStore over a temporary audit directory."""
    return ResultFileStore(str(tmp_path / 'Audits'))


@pytest.fixture
def make_report():
    """Factory fixture — builds a minimal Lighthouse JSON report."""
    def _make(metrics=None, score=0.9):
        items = [metrics] if metrics is not None else []
        return {
            'audits': {'metrics': {'details': {'items': items}}},
            'categories': {'performance': {'score': score}},
        }
    return _make


class FakeEngine(AuditEngine):
    """
    Engine that writes a report per call instead of launching Chrome.

    `failures` is a set of (url, device, run) tuples that raise AuditFailedError.
    `metrics_for(url, device, run)` returns the metrics item of the report.
    """

    def __init__(self, metrics_for=None, failures=(), score=0.9):
        self.metrics_for = metrics_for or (lambda url, device, run: {'speedIndex': 1000 + run})
        self.failures = set(failures)
        self.score = score
        self.calls = []

    def audit(self, url, device, output_path):
        run = int(output_path.rsplit('-', 1)[1].split('.')[0])
        self.calls.append((url, device, run))
        if (url, device, run) in self.failures:
            raise AuditFailedError(f"Chrome crashed on {url}")
        metrics = self.metrics_for(url, device, run)
        report = {
            'audits': {'metrics': {'details': {'items': [metrics] if metrics is not None else []}}},
            'categories': {'performance': {'score': self.score}},
        }
        with open(output_path, 'w') as f:
            json.dump(report, f)


@pytest.fixture
def fake_engine_cls():
    return FakeEngine
