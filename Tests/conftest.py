"""Fixtures for the gateway test suite."""

import pytest
import responses

from mailgate.client import MailjetClient
from mailgate.config import GatewayConfig
from mailgate.notifications import SlackNotifier
from mailgate.workflow import SubscriptionWorkflow

API = "https://api.mailjet.com"
WEBHOOK = "https://hooks.slack.test/services/T000/B000/XXXX"
SITE = "https://48ix.net"

LIST_ID = 10
LIST_NAME = "public-announce"
TEMPLATE_ID = 77
CONTACT_ID = 501
RECIPIENT_ID = 9001
EMAIL = "jane@example.com"


class MailjetStub:
    """Registers canned Mailjet and Slack answers on a RequestsMock."""

    def __init__(self, rsps: responses.RequestsMock):
        self.rsps = rsps

    def contact_lists(self, lists=None, status=200):
        if lists is None:
            lists = [
                {"ID": 3, "Name": "members", "SubscriberCount": 40},
                {"ID": LIST_ID, "Name": LIST_NAME, "SubscriberCount": 12},
            ]
        self.rsps.add(responses.GET, f"{API}/v3/REST/contactslist", json={"Data": lists}, status=status)

    def list_details(self, list_id=LIST_ID, name=LIST_NAME, count=13, status=200):
        data = [{"ID": list_id, "Name": name, "SubscriberCount": count}] if status == 200 else []
        self.rsps.add(responses.GET, f"{API}/v3/REST/contactslist/{list_id}", json={"Data": data}, status=status)

    def templates(self, templates=None, status=200):
        if templates is None:
            templates = [
                {"ID": 12, "Name": "members-confirmation"},
                {"ID": TEMPLATE_ID, "Name": f"{LIST_NAME}-confirmation"},
            ]
        self.rsps.add(responses.GET, f"{API}/v3/REST/template", json={"Data": templates}, status=status)

    def contact(self, email=EMAIL, contact_id=CONTACT_ID):
        self.rsps.add(responses.GET, f"{API}/v3/REST/contact/{email}",
                      json={"Count": 1, "Data": [{"ID": contact_id, "Email": email}], "Total": 1})

    def no_contact(self, email=EMAIL):
        self.rsps.add(responses.GET, f"{API}/v3/REST/contact/{email}",
                      json={"ErrorInfo": "", "ErrorMessage": "Object not found", "StatusCode": 404}, status=404)

    def memberships(self, memberships, email=EMAIL, status=200):
        data = [{"ListID": list_id, "IsUnsub": not subscribed} for list_id, subscribed in memberships]
        self.rsps.add(responses.GET, f"{API}/v3/REST/contact/{email}/getcontactslists",
                      json={"Data": data}, status=status)

    def create_contact(self, status=201):
        self.rsps.add(responses.POST, f"{API}/v3/REST/contact",
                      json={"Data": [{"ID": CONTACT_ID, "Email": EMAIL}]}, status=status)

    def attach(self, contact_id=CONTACT_ID, status=201, json=None):
        body = json if json is not None else {"Data": [{"ID": RECIPIENT_ID, "ContactID": contact_id, "ListID": LIST_ID}]}
        self.rsps.add(responses.POST, f"{API}/v3/REST/listrecipient", json=body, status=status)

    def recipients(self, records=None):
        if records is None:
            records = [
                {"ID": 8000, "ContactID": CONTACT_ID, "ListID": 3},
                {"ID": RECIPIENT_ID, "ContactID": CONTACT_ID, "ListID": LIST_ID},
            ]
        self.rsps.add(responses.GET, f"{API}/v3/REST/listrecipient", json={"Data": records})

    def put_recipient(self, recipient_id=RECIPIENT_ID, status=200, json=None):
        body = json if json is not None else {"Data": [{"ID": recipient_id, "IsUnsubscribed": False}]}
        self.rsps.add(responses.PUT, f"{API}/v3/REST/listrecipient/{recipient_id}", json=body, status=status)

    def send(self, status=200, json=None):
        body = json if json is not None else {"Messages": [{"Status": "success"}]}
        self.rsps.add(responses.POST, f"{API}/v3.1/send", json=body, status=status)

    def webhook(self, status=200, body="ok"):
        self.rsps.add(responses.POST, WEBHOOK, body=body, status=status)

    def calls(self):
        """(method, url) of every request issued so far"""
        return [(call.request.method, call.request.url) for call in self.rsps.calls]


@pytest.fixture
def config():
    return GatewayConfig(
        mailjet_user="user",
        mailjet_pass="secret",
        api_base_url=API,
        slack_webhook_url=WEBHOOK,
        site_url=SITE,
        sender_domain="48ix.net",
        sender_name="48 IX",
    )


@pytest.fixture
def client(config):
    return MailjetClient(config)


@pytest.fixture
def notifier(config):
    return SlackNotifier.from_config(config)


@pytest.fixture
def workflow(config, client, notifier):
    return SubscriptionWorkflow(config, client, notifier)


@pytest.fixture
def mailjet():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield MailjetStub(rsps)
