"""Domain layer - Pure business logic.

This layer contains the event-sourced aggregates, their events, value
objects and protocols (ports). The domain layer has NO dependencies on any
framework or infrastructure.

Structure:
- aggregates/: State folds and decision functions (identity, client,
  authorization request, token, session)
- events/: Domain events (the append-only log) and security signals
- value_objects/: Value objects (immutable, no identity)
- protocols/: Ports (event store, index store, signer, clock, ...)
"""
