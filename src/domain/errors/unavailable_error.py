"""Collaborator unavailability errors.

Part of the port contracts in `src.domain.protocols`: adapters raise these when
the backing system (database, Redis, key service, identity provider) cannot be
reached. They propagate to the HTTP layer, which logs them with the trace id
and answers with a generic `server_error`.
"""


class CollaboratorUnavailableError(Exception):
    """An external dependency failed or timed out."""


class EventStoreUnavailableError(CollaboratorUnavailableError):
    """The event store could not append or load."""


class IndexStoreUnavailableError(CollaboratorUnavailableError):
    """The index store could not be reached."""


class SignerUnavailableError(CollaboratorUnavailableError):
    """The signing service could not sign."""


class IdentityVerifierUnavailableError(CollaboratorUnavailableError):
    """The external identity verifier could not be reached."""
