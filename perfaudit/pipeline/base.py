"""
Audit pipeline contracts.

The matrix runner only talks to an AuditEngine: given a URL, a device label
and an output path it either writes one JSON report at that path or raises
AuditFailedError. Lighthouse is the production engine; tests plug in fakes.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List


class AuditFailedError(Exception):
    """Raised by an engine when a single audit produced no usable report."""


@dataclass(frozen=True)
class AuditJob:
    """One (url, device, run) cell of a site's audit matrix."""
    site_id: int
    url: str
    device: str
    run: int


@dataclass
class MatrixResult:
    """Outcome of one AuditMatrixRunner.run() call."""
    jobs: int = 0
    completed: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)


class AuditEngine(ABC):
    """Base class for anything that can audit a single URL."""

    @abstractmethod
    def audit(self, url: str, device: str, output_path: str) -> None:
        """
        Audit `url` emulating `device` and write the JSON report to `output_path`.

        Raises:
            AuditFailedError: the audit did not produce a report.
        """
        ...
