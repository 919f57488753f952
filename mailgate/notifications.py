#!/usr/bin/env python3
"""
notifications.py

Slack notifications for mailing-list subscriptions.

Dispatch is best effort: a failed or unconfigured webhook is logged and
never affects the HTTP response already decided by the workflow.
"""

import json
import logging
import time
from enum import Enum
from typing import Any, Dict, List, Optional

import requests

from .config import GatewayConfig

logger = logging.getLogger(__name__)


class NotificationLevel(Enum):
    """Notification severity levels"""
    SUCCESS = "success"
    ERROR = "error"
    RELAY = "relay"


_COLORS = {
    NotificationLevel.SUCCESS: "#f4dc87",
    NotificationLevel.ERROR: "#f25979",
    NotificationLevel.RELAY: "#47f2ff",
}


def get_color(level: NotificationLevel) -> str:
    """Attachment color for a severity level"""
    return _COLORS[level]


def make_field(title: str, value: Any, short: bool = True) -> Dict[str, Any]:
    return {"title": title, "value": value, "short": short}


def make_subscription_message(email_addr: str, list_name: str, error_msg: Optional[str] = None,
                              subscriber_count: Optional[int] = None,
                              timestamp: Optional[int] = None) -> Dict[str, Any]:
    """Build the Slack payload announcing a subscription, or its failure"""
    attachment: Dict[str, Any] = {
        "fallback": f"{email_addr} has subscribed to {list_name}",
        "color": get_color(NotificationLevel.SUCCESS),
        "pretext": "New mailing list subscription",
        "title": f"{email_addr} has subscribed to {list_name}",
        "ts": timestamp if timestamp is not None else int(time.time()),
    }
    fields: List[Dict[str, Any]] = []
    if error_msg:
        attachment["color"] = get_color(NotificationLevel.ERROR)
        fields.append(make_field("Error", error_msg, short=False))
    elif subscriber_count is not None:
        fields.append(make_field("Subscribers", str(subscriber_count)))
    if fields:
        attachment["fields"] = fields
    return {"attachments": [attachment]}


class SlackNotifier:
    """Posts attachment-style messages to a Slack incoming webhook"""

    def __init__(self, webhook_url: str, timeout: float = 30):
        self.webhook_url = webhook_url
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: GatewayConfig) -> "SlackNotifier":
        return cls(config.slack_webhook_url, config.webhook_timeout)

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    def post_message(self, payload: Dict[str, Any]) -> requests.Response:
        """
        POST a payload to the webhook and return the raw response.

        Raises:
            requests.RequestException: if the webhook cannot be reached
        """
        return requests.post(
            self.webhook_url,
            headers={"Content-Type": "application/json;charset=UTF-8"},
            data=json.dumps(payload),
            timeout=self.timeout,
        )

    def send_message(self, payload: Dict[str, Any]) -> bool:
        """Send a payload, logging instead of raising on any failure"""
        if not self.enabled:
            self._fallback_to_log(payload)
            return False

        try:
            response = self.post_message(payload)
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ Error sending Slack notification: {e}")
            self._fallback_to_log(payload)
            return False

        if response.ok:
            logger.info("✅ Slack notification sent successfully")
            return True
        logger.error(f"❌ Slack notification failed: {response.status_code} - {response.text}")
        self._fallback_to_log(payload)
        return False

    def notify_subscription(self, email_addr: str, list_name: str, error_msg: Optional[str] = None,
                            subscriber_count: Optional[int] = None) -> bool:
        """Announce a completed or failed subscription"""
        payload = make_subscription_message(email_addr, list_name, error_msg, subscriber_count)
        return self.send_message(payload)

    def _fallback_to_log(self, payload: Dict[str, Any]):
        """Keep the notification visible in the logs when Slack is unavailable"""
        for attachment in payload.get("attachments", []):
            logger.info(f"📨 NOTIFICATION FALLBACK - {attachment.get('fallback', attachment.get('title'))}")
            for item in attachment.get("fields", []):
                logger.info(f"   {item['title']}: {item['value']}")
