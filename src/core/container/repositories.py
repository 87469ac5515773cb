"""Aggregate repository factories.

One application-scoped AggregateRepository per aggregate type. Each folds its
streams from the shared event store and publishes appended events on the
shared event bus. The fold cache inside each repository is only a cache: it
is always topped up from the event store before a read.
"""

from functools import lru_cache

from src.application.event_sourcing import AggregateRepository
from src.core.config import get_settings
from src.core.container.events import get_event_bus
from src.core.container.infrastructure import get_event_codec, get_event_store
from src.domain.aggregates import (
    AuthorizationRequest,
    Client,
    Fold,
    Identity,
    Session,
    Token,
    apply_authorization_event,
    apply_client_event,
    apply_identity_event,
    apply_session_event,
    apply_token_event,
)
from src.domain.enums import AggregateType


def _repository[S](aggregate_type: AggregateType, fold: Fold[S]) -> AggregateRepository[S]:
    return AggregateRepository(
        aggregate_type=aggregate_type,
        fold=fold,
        event_store=get_event_store(),
        event_bus=get_event_bus(),
        decode=get_event_codec().decode,
        timeout_seconds=get_settings().event_store_timeout_seconds,
    )


@lru_cache()
def get_identity_repository() -> AggregateRepository[Identity]:
    return _repository(AggregateType.IDENTITY, apply_identity_event)


@lru_cache()
def get_client_repository() -> AggregateRepository[Client]:
    return _repository(AggregateType.CLIENT, apply_client_event)


@lru_cache()
def get_authorization_repository() -> AggregateRepository[AuthorizationRequest]:
    return _repository(AggregateType.AUTHORIZATION, apply_authorization_event)


@lru_cache()
def get_token_repository() -> AggregateRepository[Token]:
    return _repository(AggregateType.TOKEN, apply_token_event)


@lru_cache()
def get_session_repository() -> AggregateRepository[Session]:
    return _repository(AggregateType.SESSION, apply_session_event)
