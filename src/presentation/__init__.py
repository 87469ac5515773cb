"""Presentation layer: HTTP surface of the identity provider.

- routers/: protocol endpoints (OAuth2, discovery) and system routes
- api/v1/: versioned management API (users, sessions, clients)
- api/errors/: OAuth2 error bodies and Problem Details rendering

Routes dispatch to application handlers and services and translate Results
into responses; they hold no business rules.
"""
