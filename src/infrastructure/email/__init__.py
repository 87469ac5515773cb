"""Email notifier implementations.

This package contains email notifier adapters:
- StubEmailNotifier: Logs the template and recipient (no delivery)
"""

from src.infrastructure.email.stub_email_notifier import StubEmailNotifier

__all__ = [
    "StubEmailNotifier",
]
