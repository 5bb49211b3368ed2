"""Password policy used when a new password is set through a reset.

Rules:
    - Length between min_length (12) and 128 characters
    - At least one uppercase letter, lowercase letter, digit and symbol
    - At least 8 unique characters
    - Not a commonly used password
    - No character repeated 4+ times in a row
    - No run of 4+ sequential characters (alphabet, digits, keyboard rows),
      forwards or backwards
"""

import re
import secrets
from dataclasses import dataclass, field

from authcore.core.enums import ErrorCode
from authcore.core.errors import ValidationError
from authcore.core.result import Failure, Result, Success

MAX_PASSWORD_LENGTH = 128
MIN_UNIQUE_CHARS = 8
SEQUENCE_LENGTH = 4

COMMON_PASSWORDS: frozenset[str] = frozenset(
    {
        "password",
        "123456",
        "123456789",
        "qwerty",
        "abc123",
        "password123",
        "admin",
        "letmein",
        "welcome",
        "monkey",
        "111111",
        "222222",
        "333333",
        "000000",
        "654321",
        "password1",
        "qwerty123",
        "123123",
        "admin123",
    }
)

SEQUENCES: tuple[str, ...] = (
    "abcdefghijklmnopqrstuvwxyz",
    "0123456789",
    "qwertyuiop",
    "asdfghjkl",
    "zxcvbnm",
)

_REPETITION = re.compile(r"(.)\1{3,}")
_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")
_SYMBOL = re.compile(r"[^A-Za-z0-9]")

_UPPER_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_LOWER_CHARS = "abcdefghijklmnopqrstuvwxyz"
_DIGIT_CHARS = "0123456789"
_SYMBOL_CHARS = "!@#$%^&*()_+-=[]{}|;:,.<>?"


@dataclass(frozen=True, slots=True)
class PasswordStrength:
    """Password strength estimate.

    Attributes:
        score: 0 to 100.
        label: very_weak, weak, medium, strong or very_strong.
        feedback: Suggestions for a stronger password.
    """

    score: int
    label: str
    feedback: list[str] = field(default_factory=list)


class PasswordPolicy:
    """Password complexity policy.

    Example:
        >>> policy = PasswordPolicy()
        >>> policy.validate("Tr0ub4dor&Horse!")
        Success(value='Tr0ub4dor&Horse!')
        >>> policy.validate("short")
        Failure(error=ValidationError(...))
    """

    def __init__(self, min_length: int = 12) -> None:
        if not 8 <= min_length <= MAX_PASSWORD_LENGTH:
            msg = f"min_length must be between 8 and {MAX_PASSWORD_LENGTH}"
            raise ValueError(msg)
        self._min_length = min_length

    def violations(self, password: str) -> list[str]:
        """List every rule the password breaks (empty when acceptable)."""
        problems: list[str] = []

        if len(password) < self._min_length:
            problems.append(f"Password must be at least {self._min_length} characters")
        if len(password) > MAX_PASSWORD_LENGTH:
            problems.append(
                f"Password must be at most {MAX_PASSWORD_LENGTH} characters"
            )
        if not _UPPER.search(password):
            problems.append("Password must contain an uppercase letter")
        if not _LOWER.search(password):
            problems.append("Password must contain a lowercase letter")
        if not _DIGIT.search(password):
            problems.append("Password must contain a digit")
        if not _SYMBOL.search(password):
            problems.append("Password must contain a special character")
        if len(set(password)) < MIN_UNIQUE_CHARS:
            problems.append(
                f"Password must contain at least {MIN_UNIQUE_CHARS} unique characters"
            )
        if self.is_common(password):
            problems.append("Password is too common")
        if self.has_excessive_repetition(password):
            problems.append("Password must not repeat a character 4 or more times")
        if self.has_sequential_chars(password):
            problems.append("Password must not contain sequential characters")

        return problems

    def validate(self, password: str) -> Result[str, ValidationError]:
        """Check a password against the policy.

        Returns:
            Success(password) if acceptable.
            Failure(ValidationError) with code PASSWORD_TOO_WEAK and the
            list of violations in details["violations"].
        """
        problems = self.violations(password)
        if problems:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.PASSWORD_TOO_WEAK,
                    message="Password does not meet security requirements",
                    field="new_password",
                    details={"violations": problems},
                )
            )
        return Success(value=password)

    @staticmethod
    def is_common(password: str) -> bool:
        return password.lower() in COMMON_PASSWORDS

    @staticmethod
    def has_excessive_repetition(password: str) -> bool:
        return _REPETITION.search(password) is not None

    @staticmethod
    def has_sequential_chars(password: str) -> bool:
        lowered = password.lower()
        for sequence in SEQUENCES:
            for candidate in (sequence, sequence[::-1]):
                for start in range(len(candidate) - SEQUENCE_LENGTH + 1):
                    if candidate[start : start + SEQUENCE_LENGTH] in lowered:
                        return True
        return False

    def strength(self, password: str) -> PasswordStrength:
        """Score a password from 0 to 100 with feedback."""
        score = 0
        feedback: list[str] = []

        if len(password) >= 12:
            score += 25
        elif len(password) >= 8:
            score += 15
            feedback.append("Use at least 12 characters")
        else:
            feedback.append("Password is too short")

        classes = {
            "Add an uppercase letter": _UPPER,
            "Add a lowercase letter": _LOWER,
            "Add a digit": _DIGIT,
            "Add a special character": _SYMBOL,
        }
        for hint, pattern in classes.items():
            if pattern.search(password):
                score += 15
            else:
                feedback.append(hint)

        if len(set(password)) >= MIN_UNIQUE_CHARS:
            score += 20
        else:
            feedback.append("Use more distinct characters")

        if self.is_common(password):
            score -= 30
            feedback.append("This is a commonly used password")
        if self.has_excessive_repetition(password):
            score -= 20
            feedback.append("Avoid repeated characters")
        if self.has_sequential_chars(password):
            score -= 15
            feedback.append("Avoid sequential characters")

        score = max(0, min(100, score))
        if score >= 80:
            label = "very_strong"
        elif score >= 60:
            label = "strong"
        elif score >= 40:
            label = "medium"
        elif score >= 20:
            label = "weak"
        else:
            label = "very_weak"

        return PasswordStrength(score=score, label=label, feedback=feedback)

    def generate(self, length: int = 16) -> str:
        """Generate a random password that satisfies this policy.

        Args:
            length: Desired length, clamped to [min_length, 128].
        """
        length = max(self._min_length, min(length, MAX_PASSWORD_LENGTH))
        alphabet = _UPPER_CHARS + _LOWER_CHARS + _DIGIT_CHARS + _SYMBOL_CHARS
        rng = secrets.SystemRandom()

        while True:
            chars = [
                secrets.choice(_UPPER_CHARS),
                secrets.choice(_LOWER_CHARS),
                secrets.choice(_DIGIT_CHARS),
                secrets.choice(_SYMBOL_CHARS),
            ]
            chars.extend(secrets.choice(alphabet) for _ in range(length - 4))
            rng.shuffle(chars)
            candidate = "".join(chars)
            if not self.violations(candidate):
                return candidate
