"""
Logging for the audit worker and the run_audits CLI.

Audit log lines carry their job context through `extra=` (see
`audit_context()`); both formats render it, so a line can be traced back to
the site, device and run that produced it. Library loggers that flood the
output while Lighthouse runs are capped at WARNING, also under LOG_LEVEL=DEBUG.
"""
import json
import logging
import os
import sys
from datetime import datetime, timezone

# Keys an audit log record may carry, in output order
CONTEXT_FIELDS = ('site_id', 'device', 'run', 'url')

# SQL echo and per-request HTTP lines; one set per audit job otherwise
_QUIET_LOGGERS = [
    'urllib3',
    'requests',
    'sqlalchemy.engine',
    'sqlalchemy.pool',
    'rq.queue',
]


def audit_context(site_id, device=None, run=None, url=None) -> dict:
    """`extra=` payload for a log line about one site or one audit job."""
    context = {'site_id': site_id, 'device': device, 'run': run, 'url': url}
    return {key: value for key, value in context.items() if value is not None}


def _context_of(record) -> dict:
    return {key: getattr(record, key) for key in CONTEXT_FIELDS if hasattr(record, key)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line; audit context keys are top-level fields."""

    def format(self, record):
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        entry.update(_context_of(record))
        if record.exc_info and record.exc_info[0] is not None:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry)


class AuditTextFormatter(logging.Formatter):
    """Plain text with a trailing `key=value` block when audit context is set."""

    def __init__(self):
        super().__init__('[%(asctime)s] %(levelname)s %(name)s: %(message)s',
                         datefmt='%Y-%m-%d %H:%M:%S')

    def format(self, record):
        line = super().format(record)
        context = _context_of(record)
        if context:
            line += ' [' + ' '.join(f'{key}={value}' for key, value in context.items()) + ']'
        return line


def configure_logging(level: str = None, fmt: str = None):
    """
    Set up the root logger.

    `level` and `fmt` default to the LOG_LEVEL (INFO) and LOG_FORMAT ("text"
    or "json") env vars, read at call time so a worker picks up its own env.
    """
    level_name = (level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    root_level = getattr(logging, level_name, logging.INFO)
    log_format = (fmt or os.getenv('LOG_FORMAT', 'text')).lower()

    root = logging.getLogger()
    root.setLevel(root_level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(root_level)
    handler.setFormatter(JSONFormatter() if log_format == 'json' else AuditTextFormatter())
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root_level))
