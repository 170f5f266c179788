#!/usr/bin/env python3
"""
Run or schedule performance audits.

Usage:
    python scripts/run_audits.py --site 3      # audit site 3 now, in this process
    python scripts/run_audits.py --schedule    # enqueue one RQ job per site (daily cron)

Requires: lighthouse on PATH, Redis running, DATABASE_URL and MATOMO_URL set.
"""
import sys
import os
import argparse

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from perfaudit import load_models
from perfaudit.config import LOG_FORMAT, LOG_LEVEL
from perfaudit.logging_config import configure_logging
from perfaudit.pipeline.manager import audit_site, schedule_daily_audits


def main():
    parser = argparse.ArgumentParser(description='Run Lighthouse performance audits')
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument('--site', type=int, help='Audit a single site ID in this process')
    group.add_argument('--schedule', action='store_true', help='Enqueue an audit job for every site')
    args = parser.parse_args()

    configure_logging(LOG_LEVEL, LOG_FORMAT)
    load_models()

    if args.schedule:
        site_ids = schedule_daily_audits()
        print(f'Enqueued audits for {len(site_ids)} sites.')
        return

    rows = audit_site(args.site)
    if rows is None:
        print(f'Site {args.site} was already audited today.')
    else:
        print(f'Site {args.site}: stored {rows} rows.')


if __name__ == '__main__':
    main()
