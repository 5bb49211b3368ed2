"""Success/Failure return values for the public service operations.

Login, refresh, logout, access-token validation and both password reset
operations return a Result rather than raising, and callers pattern match:

    match await auth.refresh(RefreshTokens(refresh_token=token, device=device)):
        case Success(value=pair):
            send(pair.access_token, pair.refresh_token)
        case Failure(error=AuthenticationError(code=ErrorCode.TOKEN_REUSE_DETECTED)):
            alert_user()
        case Failure(error=error):
            reject(error.code)
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    error: E


Result = Success[T] | Failure[E]
