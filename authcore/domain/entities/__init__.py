"""Domain entities."""

from authcore.domain.entities.user import User

__all__ = ["User"]
