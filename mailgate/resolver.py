#!/usr/bin/env python3
"""
resolver.py

Read-only CRM queries used to establish the current state of an address.

Every query except ``get_recipient`` returns a ``Lookup`` and never raises:
errors are logged and reported as ``FAILED`` so the caller decides whether
to abort or continue with the degraded default value.
"""

import logging
from typing import List

from .client import (
    MailjetClient, CONTACT_PATH, CONTACTS_LIST_PATH, LIST_RECIPIENT_PATH, TEMPLATE_PATH
)
from .errors import NotFoundError, RemoteApiError
from .models import (
    Contact, ContactList, EmailTemplate, ListMembership, Lookup, RecipientRecord
)

logger = logging.getLogger(__name__)


def confirmation_template_name(list_name: str) -> str:
    return f"{list_name}-confirmation"


def _to_contact_list(raw: dict) -> ContactList:
    return ContactList(
        id=raw["ID"],
        name=raw["Name"],
        subscriber_count=raw.get("SubscriberCount", 0),
    )


def get_all_contact_lists(client: MailjetClient) -> Lookup:
    """Enumerate every contact list. ``value`` is an empty list on failure."""
    try:
        response = client.get(client.url(CONTACTS_LIST_PATH))
        data = response.json()
        contact_lists = [_to_contact_list(raw) for raw in data.get("Data", [])]
    except RemoteApiError as e:
        logger.warning(f"⚠️ Contact list enumeration failed: {e.detail}")
        return Lookup.failed(e.detail, [])
    except (ValueError, KeyError, TypeError) as e:
        logger.warning(f"⚠️ Unexpected contact list payload: {e}")
        return Lookup.failed(str(e), [])

    logger.debug(f"Found {len(contact_lists)} contact lists")
    return Lookup.found(contact_lists)


def find_contact_list(client: MailjetClient, list_name: str) -> Lookup:
    """Resolve a contact list by exact name"""
    lists = get_all_contact_lists(client)
    if lists.is_failed:
        return Lookup.failed(lists.detail)

    for contact_list in lists.value:
        if contact_list.name == list_name:
            return Lookup.found(contact_list)
    logger.warning(f"⚠️ Contact list '{list_name}' not found")
    return Lookup.not_found()


def get_list_details(client: MailjetClient, list_id: int) -> Lookup:
    """Fetch a single contact list by ID"""
    try:
        response = client.get(client.url(CONTACTS_LIST_PATH, list_id))
        data = response.json()["Data"]
    except RemoteApiError as e:
        logger.warning(f"⚠️ Contact list {list_id} lookup failed: {e.detail}")
        if e.status_code == 404:
            return Lookup.not_found()
        return Lookup.failed(e.detail)
    except (ValueError, KeyError, TypeError) as e:
        logger.warning(f"⚠️ Unexpected contact list payload for {list_id}: {e}")
        return Lookup.failed(str(e))

    if not data:
        return Lookup.not_found()
    return Lookup.found(_to_contact_list(data[0]))


def get_templates(client: MailjetClient) -> Lookup:
    """Enumerate every email template. ``value`` is an empty list on failure."""
    try:
        response = client.get(client.url(TEMPLATE_PATH))
        data = response.json()
        templates = [EmailTemplate(id=t["ID"], name=t["Name"]) for t in data.get("Data", [])]
    except RemoteApiError as e:
        logger.error(f"❌ Template enumeration failed: {e.detail}")
        return Lookup.failed(e.detail, [])
    except (ValueError, KeyError, TypeError) as e:
        logger.error(f"❌ Unexpected template payload: {e}")
        return Lookup.failed(str(e), [])
    return Lookup.found(templates)


def find_template(client: MailjetClient, list_name: str) -> Lookup:
    """Resolve the ``{list_name}-confirmation`` template"""
    name = confirmation_template_name(list_name)
    templates = get_templates(client)
    if templates.is_failed:
        return Lookup.failed(templates.detail)

    for template in templates.value:
        if template.name == name:
            return Lookup.found(template)
    logger.warning(f"⚠️ Confirmation template '{name}' not found")
    return Lookup.not_found()


def get_contact(client: MailjetClient, email_addr: str) -> Lookup:
    """
    Look up a contact by email address.

    ``value`` is always a ``Contact``; it only has ``exists=True`` and a real
    ID when the lookup succeeded. A 404 is ``NOT_FOUND``, any other error is
    ``FAILED``.
    """
    absent = Contact(email=email_addr)
    try:
        response = client.get(client.url(CONTACT_PATH, email_addr))
        contact_id = response.json()["Data"][0]["ID"]
    except RemoteApiError as e:
        if e.status_code == 404:
            logger.debug(f"Contact {email_addr} does not exist yet")
            return Lookup.not_found(absent)
        logger.warning(f"⚠️ Contact lookup failed for {email_addr}: {e.detail}")
        return Lookup.failed(e.detail, absent)
    except (ValueError, KeyError, IndexError, TypeError) as e:
        logger.warning(f"⚠️ Unexpected contact payload for {email_addr}: {e}")
        return Lookup.failed(str(e), absent)

    return Lookup.found(Contact(email=email_addr, id=contact_id, exists=True))


def get_contact_lists(client: MailjetClient, email_addr: str) -> Lookup:
    """List the memberships of a contact. ``value`` is an empty list on failure."""
    try:
        response = client.get(client.url(CONTACT_PATH, email_addr, "getcontactslists"))
        data = response.json()
        memberships = [
            ListMembership(list_id=m["ListID"], subscribed=not m.get("IsUnsub", False))
            for m in data.get("Data", [])
        ]
    except RemoteApiError as e:
        logger.warning(f"⚠️ Membership lookup failed for {email_addr}: {e.detail}")
        return Lookup.failed(e.detail, [])
    except (ValueError, KeyError, TypeError) as e:
        logger.warning(f"⚠️ Unexpected membership payload for {email_addr}: {e}")
        return Lookup.failed(str(e), [])
    return Lookup.found(memberships)


def find_membership(memberships: List[ListMembership], list_id: int) -> Lookup:
    for membership in memberships:
        if membership.list_id == list_id:
            return Lookup.found(membership)
    return Lookup.not_found()


def get_recipient(client: MailjetClient, contact_id: int, list_id: int) -> RecipientRecord:
    """
    Find the list-recipient record joining ``contact_id`` to ``list_id``.

    There is no server-side filter for this, so the full recipient listing
    is scanned for the first match.

    Raises:
        NotFoundError: if no record matches
        RemoteApiError: if the listing itself fails
    """
    response = client.get(client.url(LIST_RECIPIENT_PATH))
    try:
        recipients = response.json().get("Data", [])
    except ValueError as e:
        raise RemoteApiError(f"Unreadable recipient listing: {e}", response.status_code) from e

    for recipient in recipients:
        if recipient.get("ContactID") == contact_id and recipient.get("ListID") == list_id:
            return RecipientRecord(id=recipient["ID"], contact_id=contact_id, list_id=list_id)

    logger.warning(f"⚠️ No recipient record for contact {contact_id} on list {list_id}")
    raise NotFoundError("Contact not found.")
