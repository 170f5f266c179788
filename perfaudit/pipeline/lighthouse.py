"""
Lighthouse CLI engine.

A LighthouseConfig is built per site by the caller and handed to the engine,
so two sites never share headers or flags.
"""
import json
import logging
import subprocess
from dataclasses import dataclass, field
from typing import Dict, List

from perfaudit.config import LIGHTHOUSE_BIN, LIGHTHOUSE_TIMEOUT, LIGHTHOUSE_CHROME_FLAGS
from perfaudit.devices import DESKTOP
from perfaudit.pipeline.base import AuditEngine, AuditFailedError

logger = logging.getLogger('pipeline.lighthouse')


@dataclass
class LighthouseConfig:
    binary: str = LIGHTHOUSE_BIN
    timeout: int = LIGHTHOUSE_TIMEOUT
    chrome_flags: str = LIGHTHOUSE_CHROME_FLAGS
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def for_site(cls, settings) -> 'LighthouseConfig':
        """Build the config for a site from its SiteSettings row."""
        return cls(headers=settings.extra_headers)


class LighthouseEngine(AuditEngine):
    """Runs `lighthouse <url>` once per audit, performance category only."""

    def __init__(self, config: LighthouseConfig = None):
        self.config = config or LighthouseConfig()

    def command(self, url: str, device: str, output_path: str) -> List[str]:
        cmd = [
            self.config.binary,
            url,
            '--output=json',
            f'--output-path={output_path}',
            '--only-categories=performance',
            f'--chrome-flags={self.config.chrome_flags}',
            '--quiet',
        ]
        if device == DESKTOP:
            cmd.append('--preset=desktop')
        else:
            cmd.append('--form-factor=mobile')
        if self.config.headers:
            cmd.append(f'--extra-headers={json.dumps(self.config.headers)}')
        return cmd

    def audit(self, url: str, device: str, output_path: str) -> None:
        cmd = self.command(url, device, output_path)
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.config.timeout,
            )
        except subprocess.TimeoutExpired:
            raise AuditFailedError(
                f"Lighthouse timed out after {self.config.timeout}s for {url} ({device})"
            ) from None
        except OSError as e:
            raise AuditFailedError(f"Lighthouse could not be started: {e}") from e

        if proc.returncode != 0:
            stderr = (proc.stderr or '').strip()
            raise AuditFailedError(
                f"Lighthouse exited with {proc.returncode} for {url} ({device}): {stderr[-500:]}"
            )
