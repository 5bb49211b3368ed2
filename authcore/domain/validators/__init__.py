"""Domain validators."""

from authcore.domain.validators.password_policy import PasswordPolicy, PasswordStrength

__all__ = ["PasswordPolicy", "PasswordStrength"]
