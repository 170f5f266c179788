"""
Metric aggregation — the heavy lifting of a site audit.

Every result file of a site is parsed, its whitelisted metrics are appended to
the samples of its (site, url, device) group, and each group's samples are
finally reduced to [min, median, max]:

    {site_id: {url_hash: {device: {metric: [min, median, max]}}}}

Grouping is order-independent, so the directory order of the files does not
matter. There is no per-file dedup marker: feeding the same file twice into
one accumulator counts its samples twice.
"""
import json
import logging
from collections import namedtuple
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from perfaudit.config import METRICS
from perfaudit.pipeline.files import ResultFileStore, ResultKey

logger = logging.getLogger('pipeline.aggregator')

GroupKey = namedtuple('GroupKey', ['site_id', 'url', 'device'])


def round_half_up(value) -> int:
    """Round to the nearest integer, halves away from zero (2.5 → 3)."""
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def median(values: List[float]) -> float:
    """Median of `values`; mean of the two middle values for even counts."""
    count = len(values)
    if count < 1:
        return 0
    ordered = sorted(values)
    middle = (count - 1) // 2
    middle_next = middle + 1 - (count % 2)
    return (ordered[middle] + ordered[middle_next]) / 2


def summarize(values: List[float]) -> List[int]:
    return [int(min(values)), round_half_up(median(values)), int(max(values))]


def extract_metrics(report: Any) -> Optional[Dict[str, float]]:
    """
    Pull the whitelisted metrics and the performance score out of a report.

    Returns None when the report has no metrics detail item. A null score
    (Lighthouse reports one when a single metric errored) only drops the
    score sample.
    """
    try:
        item = report['audits']['metrics']['details']['items'][0]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(item, dict):
        return None

    try:
        score = report['categories']['performance']['score']
    except (KeyError, TypeError):
        score = None

    merged = dict(item)
    merged.pop('score', None)
    if score is not None:
        merged['score'] = round_half_up(score * 100)
    return {name: merged[name] for name in METRICS if merged.get(name) is not None}


class SampleAccumulator:
    """Samples per group, then per metric, in arrival order."""

    def __init__(self):
        self._groups: Dict[GroupKey, Dict[str, List[float]]] = {}

    def add_sample(self, key: GroupKey, metric: str, value) -> None:
        self._groups.setdefault(key, {}).setdefault(metric, []).append(value)

    def add_samples(self, key: GroupKey, metrics: Dict[str, float]) -> None:
        for metric, value in metrics.items():
            self.add_sample(key, metric, value)

    def __len__(self):
        return len(self._groups)

    def grouped(self) -> Dict[int, Dict[str, Dict[str, Dict[str, List[float]]]]]:
        """Raw samples nested as site → url → device → metric."""
        tree = {}
        for key, metrics in self._groups.items():
            devices = tree.setdefault(key.site_id, {}).setdefault(key.url, {})
            devices[key.device] = {metric: list(values) for metric, values in metrics.items()}
        return tree

    def reduce(self) -> Dict[int, Dict[str, Dict[str, Dict[str, List[int]]]]]:
        """Replace every metric's samples with [min, median, max]."""
        return {
            site_id: {
                url: {
                    device: {metric: summarize(values) for metric, values in metrics.items()}
                    for device, metrics in devices.items()
                }
                for url, devices in urls.items()
            }
            for site_id, urls in self.grouped().items()
        }


class MetricAggregator:

    def __init__(self, store: ResultFileStore):
        self.store = store

    def aggregate(self, site_id: int) -> dict:
        """Aggregate every result file currently stored for `site_id`."""
        return self.aggregate_files(self.store.list_for(site_id))

    def aggregate_files(self, paths: Iterable[str],
                        accumulator: Optional[SampleAccumulator] = None) -> dict:
        accumulator = accumulator if accumulator is not None else SampleAccumulator()
        processed = 0
        for path in paths:
            if self._consume(path, accumulator):
                processed += 1
        logger.debug("Audit files processed: %d usable, %d groups", processed, len(accumulator))

        if not accumulator:
            logger.warning("Audit files result is empty!")
            return {}

        results = accumulator.reduce()
        logger.debug("Final audit values: %s", json.dumps(results))
        return results

    @staticmethod
    def _consume(path: str, accumulator: SampleAccumulator) -> bool:
        try:
            key = ResultKey.from_filename(path)
        except ValueError:
            logger.warning("Skipping audit file with unexpected name %s", path)
            return False
        try:
            with open(path, encoding='utf-8') as f:
                report = json.load(f)
        except (ValueError, UnicodeDecodeError):
            logger.warning("Skipping unreadable audit file %s", path)
            return False

        metrics = extract_metrics(report)
        if metrics is None:
            return False

        accumulator.add_samples(GroupKey(key.site_id, key.url_hash, key.device), metrics)
        return True
