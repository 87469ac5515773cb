"""Application layer - Use cases and orchestration.

This layer contains the application's use cases following the CQRS pattern:
- Commands: Write operations that append events to aggregate streams
- Queries: Read operations that fold aggregate streams into views
- Services: Token issuance/verification, sessions, client authentication,
  revocation cascades and retention sweeps shared by several handlers

Structure:
- commands/: Command dataclasses and handlers (write operations)
- queries/: Query dataclasses and handlers (read operations)
- services/: Multi-aggregate application services
- event_sourcing.py: Aggregate repository (load, save, optimistic retry)
- dtos/: Handler results crossing into the presentation layer

The application layer orchestrates domain logic but contains no business rules.
"""
