"""
Centralized configuration — all env vars, constants, metric whitelist.
"""
import os


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── Redis ─────────────────────────────────────────────────────────────────────
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

# ── Database ──────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///local.db')
TABLE_PREFIX = os.getenv('TABLE_PREFIX', 'matomo_')

# ── Audit files ───────────────────────────────────────────────────────────────
AUDIT_DIR = os.getenv('AUDIT_DIR', os.path.join(os.getcwd(), 'Audits'))

# ── Lighthouse ────────────────────────────────────────────────────────────────
LIGHTHOUSE_BIN = os.getenv('LIGHTHOUSE_BIN', 'lighthouse')
LIGHTHOUSE_TIMEOUT = int(os.getenv('LIGHTHOUSE_TIMEOUT', '300'))
LIGHTHOUSE_CHROME_FLAGS = os.getenv('LIGHTHOUSE_CHROME_FLAGS', '--headless --no-sandbox')

# Number of audits run in parallel. 1 keeps the matrix strictly sequential.
AUDIT_WORKERS = int(os.getenv('AUDIT_WORKERS', '1'))

# ── Matomo reporting API ─────────────────────────────────────────────────────
MATOMO_URL = os.getenv('MATOMO_URL', 'http://localhost')
MATOMO_TOKEN_AUTH = os.getenv('MATOMO_TOKEN_AUTH')
PAGE_URL_DATE = os.getenv('PAGE_URL_DATE', 'last30')

# ── Slack notifications ──────────────────────────────────────────────────────
SLACK_WEBHOOK_URL = os.getenv('SLACK_WEBHOOK_URL')

# ── Site settings defaults ───────────────────────────────────────────────────
DEFAULT_RUN_COUNT = int(os.getenv('DEFAULT_RUN_COUNT', '3'))
DEFAULT_EMULATED_DEVICE = os.getenv('DEFAULT_EMULATED_DEVICE', 'both')

# ── Metrics kept from each Lighthouse report ─────────────────────────────────
# `score` is synthetic: categories.performance.score * 100
METRICS = [
    'score',
    'firstContentfulPaint',
    'speedIndex',
    'largestContentfulPaint',
    'interactive',
    'totalBlockingTime',
    'cumulativeLayoutShift',
]
