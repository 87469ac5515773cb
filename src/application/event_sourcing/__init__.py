"""Event-sourcing plumbing for the application layer.

- AggregateRepository: fold-on-load with an incremental cache, append-then-
  publish on save
- retry_on_conflict: bounded re-run of load-decide-append operations
"""

from src.application.event_sourcing.aggregate_repository import (
    AggregateRepository,
    EventDecoder,
    Loaded,
)
from src.application.event_sourcing.conflict_retry import (
    is_concurrency_conflict,
    retry_on_conflict,
)

__all__ = [
    "AggregateRepository",
    "EventDecoder",
    "Loaded",
    "is_concurrency_conflict",
    "retry_on_conflict",
]
