"""
Mailing List Gateway - Core Package

Double opt-in subscription gateway between the public website forms and the
Mailjet contact API, with Slack notifications for operational visibility.

Core modules:
- config: Environment-driven configuration
- client: Authenticated Mailjet API access and error normalization
- resolver: Read-only contact, list, membership and template queries
- mutators: Contact creation, list attachment, subscription and confirmation email
- notifications: Slack webhook notifications
- workflow: Subscription state resolution and response building
- relay: Website form relays to Slack
- main: Flask application and entry point
"""

__version__ = "1.0.0"

__all__ = [
    'config',
    'client',
    'resolver',
    'mutators',
    'notifications',
    'workflow',
    'relay',
    'main',
]
