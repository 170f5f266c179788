"""
Notifications — Slack webhook integration for audit events.

Notification failure never blocks the audit.
"""
import logging
import requests

from perfaudit.config import SLACK_WEBHOOK_URL

logger = logging.getLogger('services.notifications')


def notify_audit_event(event, site_id, urls, devices, run_count):
    """Matrix lifecycle listener: posts start / end of a site's audit matrix."""
    if not SLACK_WEBHOOK_URL:
        return

    try:
        phase = 'finished' if event.endswith('.end') else 'started'
        text = (f"Performance audit {phase} for site {site_id}: "
                f"{len(urls)} URLs × {', '.join(devices)} × {run_count} runs")
        requests.post(SLACK_WEBHOOK_URL, json={"text": text}, timeout=10)
        logger.info("Site %s '%s' notification sent", site_id, event)

    except Exception:
        logger.error("Failed to send '%s' notification for site %s", event, site_id, exc_info=True)


def notify_site_audited(site_id, files, rows):
    """Post the outcome of a site audit to Slack."""
    if not SLACK_WEBHOOK_URL:
        return

    try:
        blocks = [
            {
                "type": "header",
                "text": {
                    "type": "plain_text",
                    "text": f"Performance Audit Stored — Site {site_id}",
                }
            },
            {
                "type": "section",
                "fields": [
                    {"type": "mrkdwn", "text": f"*Audit files:* {files}"},
                    {"type": "mrkdwn", "text": f"*Rows stored:* {rows}"},
                ]
            },
        ]
        requests.post(SLACK_WEBHOOK_URL, json={"blocks": blocks}, timeout=10)
        logger.info("Site %s completion notification sent", site_id)

    except Exception:
        logger.error("Failed to send completion notification for site %s", site_id, exc_info=True)
