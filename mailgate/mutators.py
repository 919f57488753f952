#!/usr/bin/env python3
"""
mutators.py

CRM write operations. Each returns a result object instead of raising so the
workflow can turn failures into a response or a failure redirect. Nothing
is retried.
"""

import logging

import requests

from .client import MailjetClient, CONTACT_PATH, LIST_RECIPIENT_PATH, SEND_PATH
from .errors import NotFoundError, RemoteApiError
from .models import EmailResult, ListAttachment, SubscriptionResult
from .resolver import get_recipient

logger = logging.getLogger(__name__)


def add_contact(client: MailjetClient, email_addr: str) -> bool:
    """Create a contact. Returns True only when the CRM answers 201 Created."""
    try:
        response = client.post(client.url(CONTACT_PATH), {"Email": email_addr})
    except RemoteApiError as e:
        logger.error(f"❌ Failed to create contact {email_addr}: {e.detail}")
        return False

    if response.status_code == requests.codes.created:
        logger.info(f"✅ Created contact {email_addr}")
        return True
    logger.warning(f"⚠️ Unexpected status creating contact {email_addr}: {response.status_code}")
    return False


def add_contact_to_list(client: MailjetClient, list_id: int, email_addr: str) -> ListAttachment:
    """
    Attach a contact to a list in an unsubscribed state.

    The subscribed flag is only ever set later by ``subscribe_contact``,
    once the address owner confirms.
    """
    payload = {
        "IsUnsubscribed": True,
        "ContactAlt": email_addr,
        "ListID": list_id,
    }
    try:
        response = client.post(client.url(LIST_RECIPIENT_PATH), payload)
    except RemoteApiError as e:
        logger.error(f"❌ Failed to add {email_addr} to list {list_id}: {e.detail}")
        return ListAttachment(added_to_list=False, error=e.detail)

    contact_id = 0
    try:
        contact_id = response.json()["Data"][0].get("ContactID", 0)
    except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
        logger.warning(f"⚠️ Could not read contact ID from list attachment of {email_addr}: {e}")

    logger.info(f"✅ Added {email_addr} to list {list_id} (unsubscribed)")
    return ListAttachment(added_to_list=True, contact_id=contact_id)


def subscribe_contact(client: MailjetClient, contact_id: int, list_id: int) -> SubscriptionResult:
    """
    Flip a contact's membership of ``list_id`` to subscribed.

    A 304 answer means the membership was already subscribed and counts as
    success.
    """
    try:
        recipient = get_recipient(client, contact_id, list_id)
        client.put(client.url(LIST_RECIPIENT_PATH, recipient.id), {"IsUnsubscribed": False})
    except RemoteApiError as e:
        if e.status_code == requests.codes.not_modified:
            logger.info(f"Contact {contact_id} already subscribed to list {list_id}")
            return SubscriptionResult(subscribed=True)
        logger.error(f"❌ Failed to subscribe contact {contact_id} to list {list_id}: {e.detail}")
        return SubscriptionResult(subscribed=False, error=e.detail)
    except NotFoundError as e:
        return SubscriptionResult(subscribed=False, error=str(e))

    logger.info(f"✅ Subscribed contact {contact_id} to list {list_id}")
    return SubscriptionResult(subscribed=True)


def build_confirmation_message(email_addr: str, template_id: int, list_name: str,
                               sender_domain: str, sender_name: str) -> dict:
    """Send API payload for a templated subscription confirmation"""
    return {
        "Messages": [
            {
                "From": {
                    "Email": f"{list_name}@{sender_domain}",
                    "Name": sender_name,
                },
                "To": [
                    {"Email": email_addr},
                ],
                "Subject": f"Confirm your subscription to {list_name} mailing list",
                "TemplateID": template_id,
                "TemplateLanguage": True,
                "Variables": {
                    "LIST_NAME": list_name,
                },
            }
        ]
    }


def send_confirmation_email(client: MailjetClient, email_addr: str, template_id: int, list_name: str,
                            sender_domain: str, sender_name: str) -> EmailResult:
    """Send the confirmation email for ``list_name`` to ``email_addr``"""
    message = build_confirmation_message(email_addr, template_id, list_name, sender_domain, sender_name)
    try:
        client.post(client.url(SEND_PATH), message)
    except RemoteApiError as e:
        logger.error(f"❌ Failed to send confirmation email to {email_addr}: {e.detail}")
        return EmailResult(sent=False, error=e.detail)

    logger.info(f"📧 Confirmation email for '{list_name}' sent to {email_addr}")
    return EmailResult(sent=True)
