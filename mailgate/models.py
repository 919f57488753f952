"""
models.py

Per-request projections of remote CRM state. Nothing here is cached or
persisted between requests.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


@dataclass
class Contact:
    """A CRM contact looked up by email address. ``id`` is 0 when absent."""

    email: str
    id: int = 0
    exists: bool = False


@dataclass
class ContactList:
    id: int
    name: str
    subscriber_count: int = 0


@dataclass
class ListMembership:
    """One list a contact belongs to. ``subscribed=False`` means pending."""

    list_id: int
    subscribed: bool
    contact_id: int = 0


@dataclass
class RecipientRecord:
    """Join record between a contact and a list, needed to flip its subscribed flag."""

    id: int
    contact_id: int
    list_id: int


@dataclass
class EmailTemplate:
    id: int
    name: str


@dataclass
class RequestContext:
    """Validated request parameters driving the workflow."""

    action: str
    email_addr: str
    list_name: str


# =============================================================================
# 🔍 TAGGED LOOKUP RESULTS
# =============================================================================

class LookupStatus(Enum):
    """Outcome of a read query against the CRM API"""
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class Lookup:
    """
    Result of a read query.

    ``value`` always holds a usable default (an empty list, an absent
    ``Contact``...) so callers that only want degraded data can ignore the
    status, while the workflow can tell "definitely absent" from "unknown".
    """

    status: LookupStatus
    value: Any = None
    detail: str = ""

    @classmethod
    def found(cls, value: Any) -> "Lookup":
        return cls(LookupStatus.FOUND, value)

    @classmethod
    def not_found(cls, value: Any = None) -> "Lookup":
        return cls(LookupStatus.NOT_FOUND, value)

    @classmethod
    def failed(cls, detail: str, value: Any = None) -> "Lookup":
        return cls(LookupStatus.FAILED, value, detail)

    @property
    def is_found(self) -> bool:
        return self.status is LookupStatus.FOUND

    @property
    def is_failed(self) -> bool:
        return self.status is LookupStatus.FAILED


# =============================================================================
# ✍️ MUTATION RESULTS
# =============================================================================

@dataclass
class ListAttachment:
    added_to_list: bool
    contact_id: int = 0
    error: Optional[str] = None


@dataclass
class SubscriptionResult:
    subscribed: bool
    error: Optional[str] = None


@dataclass
class EmailResult:
    sent: bool
    error: Optional[str] = None
