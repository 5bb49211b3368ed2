"""Error values carried by Failure."""

from authcore.core.errors.common_errors import AuthenticationError, ValidationError
from authcore.core.errors.domain_error import DomainError

__all__ = ["AuthenticationError", "DomainError", "ValidationError"]
