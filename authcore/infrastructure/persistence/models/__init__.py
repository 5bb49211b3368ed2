"""SQLAlchemy models.

Importing this package registers every table on BaseModel.metadata.
"""

from authcore.infrastructure.persistence.base import BaseModel
from authcore.infrastructure.persistence.models.password_reset_record import (
    PasswordResetRecordModel,
)
from authcore.infrastructure.persistence.models.refresh_record import (
    RefreshRecordModel,
)
from authcore.infrastructure.persistence.models.user import UserModel

__all__ = [
    "BaseModel",
    "PasswordResetRecordModel",
    "RefreshRecordModel",
    "UserModel",
]
