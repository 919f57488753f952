#!/usr/bin/env python3
"""
relay.py

Website form relays. Each accepts the JSON body of a form submission,
turns it into a fixed Slack attachment carrying requester metadata, and
forwards it to the webhook. The webhook's status is passed back unchanged.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Tuple

import requests

from .notifications import NotificationLevel, SlackNotifier, get_color, make_field

logger = logging.getLogger(__name__)

# Set by a Cloudflare request-header transform rule from ip.geoip.asnum
ASN_HEADER = "CF-Connecting-ASN"


class RequesterInfo:
    """Connection metadata of the person submitting a form"""

    def __init__(self, ip: Optional[str] = None, country: Optional[str] = None,
                 location: Optional[str] = None, user_agent: Optional[str] = None,
                 asn: Optional[str] = None):
        self.ip = ip
        self.country = country
        self.location = location
        self.user_agent = user_agent
        self.asn = asn

    @classmethod
    def from_headers(cls, headers: Any, remote_addr: Optional[str] = None) -> "RequesterInfo":
        # CF-Ray looks like "<ray id>-<colo>"
        ray = headers.get("CF-Ray") or ""
        location = ray.rsplit("-", 1)[-1] if "-" in ray else None
        return cls(
            ip=headers.get("CF-Connecting-IP") or remote_addr,
            country=headers.get("CF-IPCountry"),
            location=location,
            user_agent=headers.get("User-Agent"),
            asn=headers.get(ASN_HEADER),
        )

    def fields(self) -> List[Dict[str, Any]]:
        fields = [make_field("Country", self.country)]
        # The ASN is only known when the edge forwards it
        if self.asn:
            fields.append(make_field("ASN", f"AS{self.asn}"))
        return fields + [
            make_field("Cloudflare Location", self.location),
            make_field("IP", self.ip),
            make_field("User Agent", self.user_agent, short=False),
        ]


def make_invite_message(form: Dict[str, Any], requester: RequesterInfo,
                        timestamp: Optional[int] = None) -> Dict[str, Any]:
    """Slack payload for a "Request Slack Invite" form"""
    contact_name = form.get("contactName")
    return {
        "attachments": [
            {
                "fallback": f"{contact_name} has requested a Slack invite",
                "color": get_color(NotificationLevel.RELAY),
                "pretext": "New Slack Invite Request",
                "title": f"Slack Invitation Request from {contact_name}",
                "fields": [
                    make_field("Contact Name", contact_name),
                    make_field("Email Address", form.get("emailAddr")),
                ] + requester.fields(),
                "ts": timestamp if timestamp is not None else int(time.time()),
            }
        ]
    }


def make_member_message(form: Dict[str, Any], requester: RequesterInfo) -> Dict[str, Any]:
    """Slack payload for a "Join" (membership request) form"""
    member_name = form.get("memberName")
    member_asn = form.get("memberAsn")
    facility_name = form.get("facilityName")
    return {
        "attachments": [
            {
                "fallback": f"{member_name} (AS{member_asn}) @ {facility_name}",
                "color": get_color(NotificationLevel.RELAY),
                "pretext": "New Member Request",
                "title": member_name,
                "title_link": f"https://peeringdb.com/asn/{member_asn}",
                "text": f"AS{member_asn}",
                "fields": [
                    make_field("Contact Name", form.get("contactName"), short=False),
                    make_field("Facility", facility_name),
                    make_field("Desired Port Speed", f"{form.get('portSpeed')} Gbps"),
                ] + requester.fields(),
                "ts": form.get("timestamp") or int(time.time()),
            }
        ]
    }


RELAY_BUILDERS = {
    "invite": make_invite_message,
    "member": make_member_message,
}


def relay_form(notifier: SlackNotifier, kind: str, form: Any,
               requester: RequesterInfo) -> Tuple[int, Dict[str, str]]:
    """
    Forward a form submission to the webhook.

    Returns the status and JSON body to answer with: the webhook's own status
    and body text, 400 for a body that is not a JSON object, or 502 when the
    webhook cannot be reached.
    """
    if not isinstance(form, dict):
        logger.warning(f"⚠️ Rejected {kind} relay with a non-object body")
        return 400, {"message": "Unable to parse request."}

    payload = RELAY_BUILDERS[kind](form, requester)
    try:
        response = notifier.post_message(payload)
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Failed to relay {kind} request to Slack: {e}")
        return 502, {"message": str(e)}

    logger.info(f"📨 Relayed {kind} request to Slack ({response.status_code})")
    return response.status_code, {"message": response.text}
