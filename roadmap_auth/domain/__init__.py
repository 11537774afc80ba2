# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .exceptions import InvariantViolationError
from .users.entities import Session, User
from .users.exceptions import (
    CredentialNotFoundError,
    DuplicateCredentialError,
    HashingFailureError,
    InvalidRefreshTokenError,
    SessionConflictError,
    SessionExpiredError,
    SessionNotFoundError,
    StorageFailureError,
)

__all__ = [
    "CredentialNotFoundError",
    "DuplicateCredentialError",
    "HashingFailureError",
    "InvalidRefreshTokenError",
    "InvariantViolationError",
    "Session",
    "SessionConflictError",
    "SessionExpiredError",
    "SessionNotFoundError",
    "StorageFailureError",
    "User",
]
