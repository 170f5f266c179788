"""
Result files — on-disk convention for Lighthouse reports awaiting aggregation.

Every report is stored as {site_id}-{device}-{url_hash}-{run}.json inside the
audit directory. The file name is the only link between a report and the job
that produced it, so ResultKey is the single place that encodes and decodes it.
"""
import hashlib
import json
import logging
import os
import re
from dataclasses import dataclass
from typing import Iterator, Union

from perfaudit.pipeline.base import AuditJob

logger = logging.getLogger('pipeline.files')

EXTENSION = '.json'


def canonicalize_url(url: str, subdomain: str = 'www') -> str:
    """Strip an http(s):// scheme and an optional leading `subdomain.` label."""
    return re.sub(r'^https?://(' + re.escape(subdomain) + r'\.)?', '', url)


def url_hash(url: str) -> str:
    """SHA-1 of the canonical URL — the url segment of a result file name."""
    return hashlib.sha1(canonicalize_url(url).encode('utf-8')).hexdigest()


@dataclass(frozen=True)
class ResultKey:
    site_id: int
    device: str
    url_hash: str
    run: int

    @classmethod
    def for_job(cls, job: AuditJob) -> 'ResultKey':
        return cls(job.site_id, job.device, url_hash(job.url), job.run)

    @property
    def filename(self) -> str:
        return f'{self.site_id}-{self.device}-{self.url_hash}-{self.run}{EXTENSION}'

    @classmethod
    def from_filename(cls, name: str) -> 'ResultKey':
        """Decode a result file name (with or without directory part)."""
        stem = os.path.basename(name)
        if stem.endswith(EXTENSION):
            stem = stem[:-len(EXTENSION)]
        parts = stem.split('-')
        if len(parts) != 4:
            raise ValueError(f"Not a result file name: '{name}'")
        site_id, device, hash_, run = parts
        return cls(int(site_id), device, hash_, int(run))


def _site_of(filename: str):
    head = filename.split('-', 1)[0]
    return int(head) if head.isdigit() else None


class ResultFileStore:
    """Directory of result files, shared by the runner, aggregator and cleanup."""

    def __init__(self, directory: str):
        self.directory = directory

    def ensure_directory(self) -> None:
        os.makedirs(self.directory, exist_ok=True)

    def path_for(self, key: ResultKey) -> str:
        return os.path.join(self.directory, key.filename)

    def store(self, key: ResultKey, payload: Union[dict, str, bytes]) -> str:
        """Write a report for `key`, overwriting any previous one."""
        self.ensure_directory()
        path = self.path_for(key)
        if isinstance(payload, dict):
            payload = json.dumps(payload)
        mode = 'wb' if isinstance(payload, bytes) else 'w'
        with open(path, mode) as f:
            f.write(payload)
        return path

    def list_for(self, site_id: int) -> Iterator[str]:
        """
        Yield paths of every result file of `site_id`, in directory order.

        Each call returns a fresh generator, so the listing can be restarted.
        """
        if not os.path.isdir(self.directory):
            return
        with os.scandir(self.directory) as entries:
            for entry in entries:
                if not entry.is_file() or not entry.name.endswith(EXTENSION):
                    continue
                if _site_of(entry.name) == site_id:
                    yield entry.path

    def count_for(self, site_id: int) -> int:
        return sum(1 for _ in self.list_for(site_id))

    def delete(self, path: str) -> None:
        os.remove(path)

    def delete_all(self, site_id: int) -> int:
        """Remove every result file of a site. Returns how many were removed."""
        # Materialize first so deletion does not race the directory scan
        paths = list(self.list_for(site_id))
        for path in paths:
            self.delete(path)
        logger.debug("Removed %d audit files of site %d", len(paths), site_id)
        return len(paths)
