"""Test suite for Keyward.

- unit/: Domain, application and adapter tests against in-memory or mocked
  collaborators
- integration/: SQLAlchemy event store and audit sink against SQLite
- api/: HTTP tests through the FastAPI app with the in-memory container
"""
