"""authcore - token-based authentication and session lifecycle core.

Layers:
- core: Result types, errors, configuration, dependency container
- domain: entities, value objects, protocols (ports), events
- application: authentication and password reset services
- infrastructure: JWT, bcrypt, persistence, logging, event bus adapters
"""

__version__ = "0.1.0"
