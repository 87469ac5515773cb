"""API tests package.

End-to-end tests for the OAuth2/OIDC and REST endpoints using TestClient.
Requests run through the real container (in-memory event store and
indexes), so these tests cover routing, handler orchestration, error
rendering and status codes together.
"""
