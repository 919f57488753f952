"""
errors.py

Error taxonomy for the subscription gateway. The workflow raises these
internally and converts them into HTTP responses at a single boundary.
"""

from typing import Optional


class MailingListError(Exception):
    """Base exception for all gateway errors."""


class ParseError(MailingListError):
    """A required request parameter is missing or unusable."""

    def __init__(self, message: str = "Unable to parse request."):
        super().__init__(message)


class RemoteApiError(MailingListError):
    """The CRM API answered with a non-success status or could not be reached."""

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class NotFoundError(MailingListError):
    """An expected remote record is absent."""


class TemplateMissingError(MailingListError):
    """The confirmation template for the requested list does not exist."""


class ContactListMissingError(MailingListError):
    """The requested contact list does not exist."""


class LookupFailedError(MailingListError):
    """A read query failed, so the current remote state is unknown."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail
