"""Domain protocols (ports).

Narrow behavioural contracts the domain and application layers depend on.
Infrastructure provides adapters that satisfy them structurally.
"""

from src.domain.protocols.audit_protocol import AuditSinkProtocol
from src.domain.protocols.client_assertion_protocol import ClientAssertionVerifierProtocol
from src.domain.protocols.clock_protocol import ClockProtocol
from src.domain.protocols.email_protocol import EmailNotifierProtocol, EmailTemplate
from src.domain.protocols.event_bus_protocol import EventBusProtocol, EventHandler
from src.domain.protocols.event_store_protocol import EventStoreProtocol
from src.domain.protocols.external_identity_protocol import (
    ExternalIdentityVerifierProtocol,
)
from src.domain.protocols.index_store_protocol import (
    ExpiryKey,
    IndexNamespace,
    IndexStoreProtocol,
)
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.domain.protocols.password_hashing_protocol import PasswordHashingProtocol
from src.domain.protocols.secret_generator_protocol import SecretGeneratorProtocol
from src.domain.protocols.signer_protocol import SignerProtocol

__all__ = [
    "AuditSinkProtocol",
    "ClientAssertionVerifierProtocol",
    "ClockProtocol",
    "EmailNotifierProtocol",
    "EmailTemplate",
    "EventBusProtocol",
    "EventHandler",
    "EventStoreProtocol",
    "ExpiryKey",
    "ExternalIdentityVerifierProtocol",
    "IndexNamespace",
    "IndexStoreProtocol",
    "LoggerProtocol",
    "PasswordHashingProtocol",
    "SecretGeneratorProtocol",
    "SignerProtocol",
]
