#!/usr/bin/env python3
"""
config.py

Configuration for the mailing-list subscription gateway.

Values are read from the process environment, with a local ``.env`` file
merged in at import time. A single ``GatewayConfig`` is built when the
process starts and handed to the CRM client, the notifier and the Flask app.

🔧 REQUIRED:
   MAILJET_USER / MAILJET_PASS     CRM Basic-Auth credentials

📨 OPTIONAL:
   SLACK_WEBHOOK_URL               Operational notifications (disabled when empty)
   SITE_URL                        Base of the subscribe success/failure pages
   SENDER_DOMAIN / SENDER_NAME     Confirmation email sender
"""

import os
import logging
from typing import Dict, Any, List
from dotenv import load_dotenv

load_dotenv(override=True)

logger = logging.getLogger(__name__)

# =============================================================================
# 🌐 CRM API ENDPOINTS
# =============================================================================

DEFAULT_API_BASE_URL = "https://api.mailjet.com"

# =============================================================================
# 🏠 SITE DEFAULTS
# =============================================================================

DEFAULT_SITE_URL = "https://48ix.net"
DEFAULT_SENDER_DOMAIN = "48ix.net"
DEFAULT_SENDER_NAME = "48 IX"


class GatewayConfig:
    """Process-wide gateway configuration built from environment variables"""

    def __init__(self, **overrides: Any):
        self.load_config()
        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown configuration key: {key}")
            setattr(self, key, value)

    def load_config(self):
        """Load configuration from environment variables"""

        # =============================================================================
        # 🔐 API CREDENTIALS
        # =============================================================================

        self.mailjet_user = os.getenv("MAILJET_USER", "").strip()
        self.mailjet_pass = os.getenv("MAILJET_PASS", "").strip()
        self.api_base_url = os.getenv("MAILJET_API_URL", DEFAULT_API_BASE_URL).rstrip("/")

        # =============================================================================
        # 📨 NOTIFICATIONS
        # =============================================================================

        self.slack_webhook_url = os.getenv("SLACK_WEBHOOK_URL", "").strip()
        self.webhook_timeout = float(os.getenv("WEBHOOK_TIMEOUT", "30"))

        # =============================================================================
        # 🏠 SITE & SENDER
        # =============================================================================

        self.site_url = os.getenv("SITE_URL", DEFAULT_SITE_URL).rstrip("/")
        self.sender_domain = os.getenv("SENDER_DOMAIN", DEFAULT_SENDER_DOMAIN)
        self.sender_name = os.getenv("SENDER_NAME", DEFAULT_SENDER_NAME)

        # =============================================================================
        # 🗂️ LOGGING & SERVER
        # =============================================================================

        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.log_dir = os.getenv("LOG_DIR", "")
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", "8080"))

    @property
    def notifications_enabled(self) -> bool:
        return bool(self.slack_webhook_url)

    def get_summary(self) -> Dict[str, Any]:
        """Non-secret view of the configuration, safe to log"""
        return {
            "api_base_url": self.api_base_url,
            "mailjet_user": "set" if self.mailjet_user else "missing",
            "notifications": "enabled" if self.notifications_enabled else "disabled",
            "site_url": self.site_url,
            "sender": f"{self.sender_name} <*@{self.sender_domain}>",
            "log_level": self.log_level,
        }


def validate_configuration(config: GatewayConfig) -> List[str]:
    """Return the missing required settings, logging each problem found"""
    missing = []
    if not config.mailjet_user:
        missing.append("MAILJET_USER")
    if not config.mailjet_pass:
        missing.append("MAILJET_PASS")

    if missing:
        logger.error(f"❌ Missing required config values: {', '.join(missing)}")
    if not config.notifications_enabled:
        logger.warning("⚠️ No Slack webhook URL configured - notifications disabled")
    return missing
