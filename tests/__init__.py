"""Test suite for authcore.

Test structure:
- unit/: Unit tests - services, policies and value objects with mocked ports
- integration/: Integration tests - real adapters (PyJWT, bcrypt, user-agents,
  structlog, in-memory stores) and end-to-end authentication flows
"""
