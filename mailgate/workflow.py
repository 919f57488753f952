#!/usr/bin/env python3
"""
workflow.py

Double opt-in subscription workflow.

A request names an address, a contact list and an action:

    add        create the contact if needed, attach it to the list
               unsubscribed, and send the confirmation email
    subscribe  the confirmation link: flip the membership to subscribed
               and redirect to the site's success (or failure) page

The current state is re-read from the CRM API on every request; nothing is
kept between requests. Remote calls run one after another because each
result decides the next step.
"""

import base64
import logging
from enum import Enum
from typing import Dict, Optional, Tuple
from urllib.parse import quote

from .client import MailjetClient
from .config import GatewayConfig
from .errors import (
    ContactListMissingError, LookupFailedError, ParseError, TemplateMissingError
)
from .models import Contact, ContactList, EmailTemplate, RequestContext
from .mutators import add_contact, add_contact_to_list, send_confirmation_email, subscribe_contact
from .notifications import SlackNotifier
from .query import QueryValue, parse_query
from .resolver import (
    confirmation_template_name, find_contact_list, find_membership, find_template,
    get_contact, get_contact_lists, get_list_details
)

logger = logging.getLogger(__name__)

ACTION_ADD = "add"
ACTION_SUBSCRIBE = "subscribe"
ACTIONS = (ACTION_ADD, ACTION_SUBSCRIBE)

REQUIRED_PARAMS = ("action", "emailAddr", "listName")

# Characters encodeURIComponent leaves alone besides letters, digits and "_.-"
_COMPONENT_SAFE = "!~*'()"


class SubscriptionState(Enum):
    """Where an address stands relative to the target list"""
    NO_CONTACT = "no_contact"
    CONTACT_NO_LIST = "contact_no_list"
    ON_LIST_UNSUBSCRIBED = "on_list_unsubscribed"
    ON_LIST_SUBSCRIBED = "on_list_subscribed"


class GatewayResponse:
    """Framework-neutral outcome of a request: a JSON message or a redirect"""

    def __init__(self, status: int, message: Optional[str] = None, location: Optional[str] = None):
        self.status = status
        self.message = message
        self.location = location

    @classmethod
    def json(cls, status: int, message: str) -> "GatewayResponse":
        return cls(status, message=message)

    @classmethod
    def redirect(cls, location: str) -> "GatewayResponse":
        return cls(301, location=location)

    @property
    def is_redirect(self) -> bool:
        return self.location is not None

    @property
    def body(self) -> Dict[str, str]:
        return {"message": self.message or ""}

    def __repr__(self):
        target = self.location if self.is_redirect else self.message
        return f"<GatewayResponse {self.status} {target!r}>"


def parse_request(params: Dict[str, QueryValue]) -> RequestContext:
    """
    Validate the decoded query parameters.

    Raises:
        ParseError: if a parameter is missing, valueless or the action is unknown
    """
    values = [params.get(name) for name in REQUIRED_PARAMS]
    if not all(isinstance(value, str) and value for value in values):
        raise ParseError()

    action, email_addr, list_name = values
    if action not in ACTIONS:
        raise ParseError()
    return RequestContext(action=action, email_addr=email_addr, list_name=list_name)


def encode_redirect_payload(email_addr: str, list_name: str, error: Optional[str] = None) -> str:
    """
    Encode the redirect query: the ``emailAddr=..&listName=..[&error=..]``
    string is percent-encoded as one component, then base64-encoded.
    """
    query = f"emailAddr={email_addr}&listName={list_name}"
    if error is not None:
        query += f"&error={error}"
    encoded = quote(query, safe=_COMPONENT_SAFE)
    return base64.b64encode(encoded.encode("ascii")).decode("ascii")


class SubscriptionWorkflow:
    """Resolves the subscription state of an address and applies the next step"""

    def __init__(self, config: GatewayConfig, client: MailjetClient, notifier: SlackNotifier):
        self.config = config
        self.client = client
        self.notifier = notifier

    # ------------------------------------------------------------------
    # Redirect targets
    # ------------------------------------------------------------------

    def success_url(self, ctx: RequestContext) -> str:
        payload = encode_redirect_payload(ctx.email_addr, ctx.list_name)
        return f"{self.config.site_url}/subscribe?{payload}"

    def failure_url(self, ctx: RequestContext, error: Optional[str]) -> str:
        payload = encode_redirect_payload(ctx.email_addr, ctx.list_name, error)
        return f"{self.config.site_url}/subscribe/failure?{payload}"

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def handle_query(self, query_string: str) -> GatewayResponse:
        return self.handle_request(parse_query(query_string))

    def handle_request(self, params: Dict[str, QueryValue]) -> GatewayResponse:
        """Run the workflow for decoded parameters and build the response"""
        try:
            ctx = parse_request(params)
        except ParseError as e:
            logger.warning(f"⚠️ Rejected request with parameters {sorted(params)}")
            return GatewayResponse.json(500, str(e))

        logger.info(f"📋 {ctx.action} request for {ctx.email_addr} on list '{ctx.list_name}'")
        try:
            response = self._run(ctx)
        except ContactListMissingError:
            response = GatewayResponse.json(500, f"Contact list '{ctx.list_name}' does not exist.")
        except TemplateMissingError:
            response = GatewayResponse.json(
                500, f"Error sending confirmation email to '{ctx.email_addr}' for list '{ctx.list_name}'"
            )
        except LookupFailedError as e:
            response = GatewayResponse.json(
                500, f"Unable to determine the state of '{ctx.email_addr}' on list '{ctx.list_name}': {e.detail}"
            )

        if response is None:
            logger.error(f"❌ Unhandled state for {ctx.email_addr} on list '{ctx.list_name}' ({ctx.action})")
            response = GatewayResponse.json(
                500, f"An error occurred while attempting to add '{ctx.email_addr}' to list '{ctx.list_name}'"
            )
        logger.info(f"Responding {response!r}")
        return response

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _require_contact_list(self, ctx: RequestContext) -> ContactList:
        lookup = find_contact_list(self.client, ctx.list_name)
        if lookup.is_failed:
            raise LookupFailedError(lookup.detail)
        if not lookup.is_found:
            raise ContactListMissingError(ctx.list_name)
        return lookup.value

    def _require_template(self, ctx: RequestContext) -> EmailTemplate:
        lookup = find_template(self.client, ctx.list_name)
        if not lookup.is_found:
            if lookup.is_failed:
                logger.error(f"❌ Template lookup failed: {lookup.detail}")
            raise TemplateMissingError(confirmation_template_name(ctx.list_name))
        return lookup.value

    def _resolve_state(self, ctx: RequestContext,
                       contact_list: ContactList) -> Tuple[SubscriptionState, Contact]:
        contact_lookup = get_contact(self.client, ctx.email_addr)
        if contact_lookup.is_failed:
            raise LookupFailedError(contact_lookup.detail)
        if not contact_lookup.is_found:
            return SubscriptionState.NO_CONTACT, contact_lookup.value

        contact = contact_lookup.value
        memberships = get_contact_lists(self.client, ctx.email_addr)
        if memberships.is_failed:
            raise LookupFailedError(memberships.detail)

        membership = find_membership(memberships.value, contact_list.id)
        if not membership.is_found:
            return SubscriptionState.CONTACT_NO_LIST, contact
        if membership.value.subscribed:
            return SubscriptionState.ON_LIST_SUBSCRIBED, contact
        return SubscriptionState.ON_LIST_UNSUBSCRIBED, contact

    def _attach_error(self, ctx: RequestContext, error: Optional[str]) -> GatewayResponse:
        return GatewayResponse.json(
            500, f"An error occurred while adding {ctx.email_addr} to list {ctx.list_name}: {error}"
        )

    def _run(self, ctx: RequestContext) -> Optional[GatewayResponse]:
        contact_list = self._require_contact_list(ctx)
        template = self._require_template(ctx)

        state, contact = self._resolve_state(ctx, contact_list)
        logger.debug(f"Resolved state {state.value} for {ctx.email_addr}")

        if state is SubscriptionState.NO_CONTACT:
            if not add_contact(self.client, ctx.email_addr):
                return None
            attachment = add_contact_to_list(self.client, contact_list.id, ctx.email_addr)
            if attachment.error is not None:
                return self._attach_error(ctx, attachment.error)
            # Created in this request: treat as existing from here on
            contact = Contact(email=ctx.email_addr, id=attachment.contact_id, exists=True)
            state = SubscriptionState.ON_LIST_UNSUBSCRIBED

        elif state is SubscriptionState.CONTACT_NO_LIST:
            attachment = add_contact_to_list(self.client, contact_list.id, ctx.email_addr)
            if attachment.error is not None:
                return self._attach_error(ctx, attachment.error)
            state = SubscriptionState.ON_LIST_UNSUBSCRIBED

        if state is SubscriptionState.ON_LIST_SUBSCRIBED:
            if ctx.action == ACTION_ADD:
                return GatewayResponse.json(
                    409, f"{ctx.email_addr} is already subscribed to contact list '{ctx.list_name}'"
                )
            return GatewayResponse.redirect(self.success_url(ctx))

        if ctx.action == ACTION_ADD:
            return self._send_confirmation(ctx, template)
        return self._finalize(ctx, contact, contact_list)

    # ------------------------------------------------------------------
    # Outcomes
    # ------------------------------------------------------------------

    def _send_confirmation(self, ctx: RequestContext, template: EmailTemplate) -> GatewayResponse:
        result = send_confirmation_email(
            self.client, ctx.email_addr, template.id, ctx.list_name,
            self.config.sender_domain, self.config.sender_name,
        )
        if result.error is not None:
            return GatewayResponse.json(500, result.error)
        return GatewayResponse.json(200, f"A confirmation email has been sent to '{ctx.email_addr}'")

    def _finalize(self, ctx: RequestContext, contact: Contact, contact_list: ContactList) -> GatewayResponse:
        result = subscribe_contact(self.client, contact.id, contact_list.id)
        if result.subscribed:
            details = get_list_details(self.client, contact_list.id)
            subscriber_count = details.value.subscriber_count if details.is_found else None
            self.notifier.notify_subscription(ctx.email_addr, ctx.list_name, subscriber_count=subscriber_count)
            return GatewayResponse.redirect(self.success_url(ctx))

        self.notifier.notify_subscription(ctx.email_addr, ctx.list_name, error_msg=result.error)
        return GatewayResponse.redirect(self.failure_url(ctx, result.error))
