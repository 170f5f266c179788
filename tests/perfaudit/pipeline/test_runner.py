"""Tests for perfaudit.pipeline.runner — matrix fan-out and failure isolation."""
import pytest
from unittest.mock import MagicMock, call

from perfaudit.pipeline.base import AuditJob
from perfaudit.pipeline.files import ResultFileStore, ResultKey
from perfaudit.pipeline.runner import AuditMatrixRunner, EVENT_START, EVENT_END

URLS = ['https://a.com/x', 'https://a.com/y']
DEVICES = ['desktop', 'mobile']


class TestJobs:

    def test_full_cartesian_product(self):
        jobs = AuditMatrixRunner.jobs(1, URLS, DEVICES, 3)
        assert len(jobs) == 12
        assert len(set(jobs)) == 12

    def test_nested_url_device_run_order(self):
        jobs = AuditMatrixRunner.jobs(1, URLS, DEVICES, 2)
        assert jobs[:3] == [
            AuditJob(1, 'https://a.com/x', 'desktop', 1),
            AuditJob(1, 'https://a.com/x', 'desktop', 2),
            AuditJob(1, 'https://a.com/x', 'mobile', 1),
        ]
        assert jobs[-1] == AuditJob(1, 'https://a.com/y', 'mobile', 2)

    def test_runs_start_at_one(self):
        runs = {job.run for job in AuditMatrixRunner.jobs(1, URLS, DEVICES, 3)}
        assert runs == {1, 2, 3}

    def test_no_urls_no_jobs(self):
        assert AuditMatrixRunner.jobs(1, [], DEVICES, 3) == []


class TestRun:

    def test_one_engine_call_per_job(self, store, fake_engine_cls):
        engine = fake_engine_cls()
        result = AuditMatrixRunner(engine, store).run(1, URLS, DEVICES, 3)
        assert len(engine.calls) == 12
        assert result.jobs == 12
        assert result.completed == 12
        assert result.failed == 0
        assert store.count_for(1) == 12

    def test_output_target_is_result_key_path(self, store):
        engine = MagicMock()
        AuditMatrixRunner(engine, store).run(5, ['https://www.a.com/x'], ['mobile'], 1)
        expected = store.path_for(ResultKey.for_job(AuditJob(5, 'https://www.a.com/x', 'mobile', 1)))
        engine.audit.assert_called_once_with('https://www.a.com/x', 'mobile', expected)

    def test_failed_jobs_are_skipped_not_fatal(self, store, fake_engine_cls):
        failures = {('https://a.com/x', 'desktop', 2), ('https://a.com/y', 'mobile', 3)}
        engine = fake_engine_cls(failures=failures)
        result = AuditMatrixRunner(engine, store).run(1, URLS, DEVICES, 3)

        assert len(engine.calls) == 12
        assert result.completed == 10
        assert result.failed == 2
        assert len(result.errors) == 2
        assert 'Chrome crashed' in result.errors[0]
        assert store.count_for(1) == 10

    def test_unexpected_errors_propagate(self, store):
        engine = MagicMock()
        engine.audit.side_effect = RuntimeError("disk full")
        with pytest.raises(RuntimeError, match="disk full"):
            AuditMatrixRunner(engine, store).run(1, URLS, DEVICES, 1)

    def test_creates_audit_directory(self, tmp_path, fake_engine_cls):
        store = ResultFileStore(str(tmp_path / 'a' / 'b'))
        AuditMatrixRunner(fake_engine_cls(), store).run(1, URLS[:1], DEVICES[:1], 1)
        assert store.count_for(1) == 1

    def test_worker_pool_keeps_failure_isolation(self, store, fake_engine_cls):
        failures = {('https://a.com/x', 'mobile', 1)}
        engine = fake_engine_cls(failures=failures)
        result = AuditMatrixRunner(engine, store, max_workers=4).run(1, URLS, DEVICES, 3)
        assert result.completed == 11
        assert result.failed == 1
        assert sorted(engine.calls) == sorted(
            (j.url, j.device, j.run) for j in AuditMatrixRunner.jobs(1, URLS, DEVICES, 3)
        )

    def test_zero_workers_means_sequential(self, store, fake_engine_cls):
        runner = AuditMatrixRunner(fake_engine_cls(), store, max_workers=0)
        assert runner.max_workers == 1


class TestListeners:

    def test_start_and_end_events(self, store, fake_engine_cls):
        listener = MagicMock()
        AuditMatrixRunner(fake_engine_cls(), store, listeners=[listener]).run(1, URLS, DEVICES, 2)
        assert listener.call_args_list == [
            call(EVENT_START, 1, URLS, DEVICES, 2),
            call(EVENT_END, 1, URLS, DEVICES, 2),
        ]

    def test_end_event_fires_after_jobs(self, store, fake_engine_cls):
        engine = fake_engine_cls()
        seen = []
        listener = lambda event, *args: seen.append((event, len(engine.calls)))
        AuditMatrixRunner(engine, store, listeners=[listener]).run(1, URLS, DEVICES, 1)
        assert seen == [(EVENT_START, 0), (EVENT_END, 4)]

    def test_failing_listener_does_not_abort(self, store, fake_engine_cls):
        broken = MagicMock(side_effect=RuntimeError("webhook down"))
        result = AuditMatrixRunner(fake_engine_cls(), store, listeners=[broken]).run(1, URLS, DEVICES, 1)
        assert result.completed == 4
        assert broken.call_count == 2
