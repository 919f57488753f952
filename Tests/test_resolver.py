"""Test the read-only CRM queries."""

import pytest
import responses

from mailgate.errors import NotFoundError, RemoteApiError
from mailgate.models import Contact, ContactList, EmailTemplate, ListMembership, LookupStatus
from mailgate import resolver

from conftest import API, CONTACT_ID, EMAIL, LIST_ID, LIST_NAME, RECIPIENT_ID, TEMPLATE_ID


def test_get_all_contact_lists(client, mailjet):
    mailjet.contact_lists()

    lookup = resolver.get_all_contact_lists(client)

    assert lookup.is_found
    assert lookup.value == [
        ContactList(id=3, name="members", subscriber_count=40),
        ContactList(id=LIST_ID, name=LIST_NAME, subscriber_count=12),
    ]


def test_get_all_contact_lists_failure_is_empty(client, mailjet):
    mailjet.contact_lists(status=401)

    lookup = resolver.get_all_contact_lists(client)

    assert lookup.status is LookupStatus.FAILED
    assert lookup.value == []
    assert lookup.detail


def test_find_contact_list_by_exact_name(client, mailjet):
    mailjet.contact_lists()

    lookup = resolver.find_contact_list(client, LIST_NAME)

    assert lookup.is_found
    assert lookup.value.id == LIST_ID


def test_find_contact_list_missing(client, mailjet):
    mailjet.contact_lists()

    lookup = resolver.find_contact_list(client, "Public-Announce")

    assert lookup.status is LookupStatus.NOT_FOUND


def test_get_list_details(client, mailjet):
    mailjet.list_details(count=99)

    lookup = resolver.get_list_details(client, LIST_ID)

    assert lookup.value == ContactList(id=LIST_ID, name=LIST_NAME, subscriber_count=99)


def test_get_list_details_not_found(client, mailjet):
    mailjet.list_details(status=404)

    assert resolver.get_list_details(client, LIST_ID).status is LookupStatus.NOT_FOUND


def test_find_template_uses_confirmation_name(client, mailjet):
    mailjet.templates()

    lookup = resolver.find_template(client, LIST_NAME)

    assert lookup.value == EmailTemplate(id=TEMPLATE_ID, name="public-announce-confirmation")


def test_find_template_missing(client, mailjet):
    mailjet.templates(templates=[{"ID": 1, "Name": LIST_NAME}])

    assert resolver.find_template(client, LIST_NAME).status is LookupStatus.NOT_FOUND


def test_find_template_failure(client, mailjet):
    mailjet.templates(status=500)

    assert resolver.find_template(client, LIST_NAME).is_failed


def test_get_contact_exists(client, mailjet):
    mailjet.contact()

    lookup = resolver.get_contact(client, EMAIL)

    assert lookup.value == Contact(email=EMAIL, id=CONTACT_ID, exists=True)


def test_get_contact_absent(client, mailjet):
    mailjet.no_contact()

    lookup = resolver.get_contact(client, EMAIL)

    assert lookup.status is LookupStatus.NOT_FOUND
    assert lookup.value == Contact(email=EMAIL, id=0, exists=False)


def test_get_contact_error_is_failed_and_absent(client, mailjet):
    mailjet.rsps.add(responses.GET, f"{API}/v3/REST/contact/{EMAIL}", status=500, body="boom")

    lookup = resolver.get_contact(client, EMAIL)

    assert lookup.is_failed
    assert lookup.detail == "boom"
    assert lookup.value.exists is False
    assert lookup.value.id == 0


def test_get_contact_lists_inverts_unsub_flag(client, mailjet):
    mailjet.memberships([(LIST_ID, False), (3, True)])

    lookup = resolver.get_contact_lists(client, EMAIL)

    assert lookup.value == [
        ListMembership(list_id=LIST_ID, subscribed=False),
        ListMembership(list_id=3, subscribed=True),
    ]


def test_get_contact_lists_failure(client, mailjet):
    mailjet.memberships([], status=500)

    lookup = resolver.get_contact_lists(client, EMAIL)

    assert lookup.is_failed
    assert lookup.value == []


def test_find_membership():
    memberships = [ListMembership(list_id=3, subscribed=True), ListMembership(list_id=LIST_ID, subscribed=False)]

    assert resolver.find_membership(memberships, LIST_ID).value.subscribed is False
    assert resolver.find_membership(memberships, 42).status is LookupStatus.NOT_FOUND


def test_get_recipient_scans_listing(client, mailjet):
    mailjet.recipients()

    recipient = resolver.get_recipient(client, CONTACT_ID, LIST_ID)

    assert recipient.id == RECIPIENT_ID
    assert (recipient.contact_id, recipient.list_id) == (CONTACT_ID, LIST_ID)


def test_get_recipient_not_found(client, mailjet):
    mailjet.recipients(records=[{"ID": 1, "ContactID": 2, "ListID": LIST_ID}])

    with pytest.raises(NotFoundError):
        resolver.get_recipient(client, CONTACT_ID, LIST_ID)


def test_get_recipient_listing_failure(client, mailjet):
    mailjet.rsps.add(responses.GET, f"{API}/v3/REST/listrecipient", status=401,
                     json={"ErrorCode": "mj-0001", "ErrorMessage": "Unauthorized"})

    with pytest.raises(RemoteApiError) as excinfo:
        resolver.get_recipient(client, CONTACT_ID, LIST_ID)

    assert excinfo.value.detail == "mj-0001: Unauthorized"
