"""Infrastructure layer: adapters behind the domain protocols.

- event_store/: append-only event log (in-memory, SQLAlchemy)
- index/: uniqueness claims, lookups and expiry sets (in-memory, Redis)
- security/: bcrypt, JWS signing, client and external assertions
- events/: in-process event bus and its audit, email and logging handlers
- persistence/: SQLAlchemy base, engine and audit table
"""
