#!/usr/bin/env python3
"""
client.py

Thin authenticated wrapper around the Mailjet REST API.

Every call is a standalone ``requests`` call with the configured Basic-Auth
credentials; no cookies or connection state outlive a single call. Any
non-2xx answer is turned into a ``RemoteApiError`` whose detail is read
from the provider's error body.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from .config import GatewayConfig
from .errors import RemoteApiError

logger = logging.getLogger(__name__)

# =============================================================================
# 🌐 MAILJET ENDPOINT PATHS
# =============================================================================

CONTACT_PATH = "/v3/REST/contact"
CONTACTS_LIST_PATH = "/v3/REST/contactslist"
LIST_RECIPIENT_PATH = "/v3/REST/listrecipient"
TEMPLATE_PATH = "/v3/REST/template"
SEND_PATH = "/v3.1/send"

GENERAL_ERROR = "General Error"

# Characters left alone when a full URL is encoded before a GET
_URI_SAFE = ";,/?:@&=+$!*'()#~"


def encode_uri(url: str) -> str:
    """Percent-encode a full URL, keeping its reserved delimiters intact"""
    return quote(url, safe=_URI_SAFE)


class MailjetClient:
    """Authenticated HTTP access to the CRM API"""

    def __init__(self, config: GatewayConfig):
        self.base_url = config.api_base_url
        self.auth = (config.mailjet_user, config.mailjet_pass)
        self.headers = {
            "Accept": "application/json",
            "User-Agent": "Mailing-List-Gateway/1.0",
        }

    def url(self, path: str, *parts: Any) -> str:
        """Build an absolute endpoint URL from a path and optional segments"""
        suffix = "".join(f"/{part}" for part in parts)
        return f"{self.base_url}{path}{suffix}"

    def client_error(self, response: requests.Response) -> str:
        """
        Resolve a readable error detail from a failed response.

        Tries the provider's JSON error schema first, then the raw body text,
        then falls back to a generic message. Parse failures on the way are
        logged but never raised.
        """
        detail = ""
        try:
            data = response.json()
            if isinstance(data, dict) and ("ErrorCode" in data or "ErrorMessage" in data):
                detail = f"{data.get('ErrorCode')}: {data.get('ErrorMessage')}"
        except ValueError as e:
            logger.warning(f"Could not read error response as JSON ({response.status_code}): {e}")

        if not detail:
            try:
                detail = response.text.strip()
            except (UnicodeDecodeError, LookupError) as e:
                logger.warning(f"Could not read error response as text ({response.status_code}): {e}")

        return detail or GENERAL_ERROR

    def _request(self, method: str, url: str, data: Optional[Dict] = None) -> requests.Response:
        kwargs: Dict[str, Any] = {}
        # Only send a body when one is given
        if data is not None:
            kwargs["json"] = data

        try:
            response = requests.request(method, url, auth=self.auth, headers=self.headers, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ {method} {url} failed: {e}")
            raise RemoteApiError(str(e)) from e

        if not 200 <= response.status_code < 300:
            raise RemoteApiError(self.client_error(response), response.status_code)
        return response

    def get(self, url: str) -> requests.Response:
        return self._request("GET", encode_uri(url))

    def post(self, url: str, data: Optional[Dict] = None) -> requests.Response:
        return self._request("POST", url, data)

    def put(self, url: str, data: Optional[Dict] = None) -> requests.Response:
        return self._request("PUT", url, data)
