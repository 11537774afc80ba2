# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from roadmap_auth.shared.errors.base import DomainError, InfrastructureError


class DuplicateCredentialError(DomainError):
    code = "username_taken"
    status = HTTPStatus.CONFLICT


class CredentialNotFoundError(DomainError):
    # Same public code as a password mismatch so callers cannot enumerate usernames.
    code = "invalid_credentials"
    status = HTTPStatus.UNAUTHORIZED


class InvalidRefreshTokenError(DomainError):
    code = "refresh_failed"
    status = HTTPStatus.UNAUTHORIZED


class SessionNotFoundError(DomainError):
    code = "session_not_found"
    status = HTTPStatus.UNAUTHORIZED


class SessionExpiredError(DomainError):
    code = "session_expired"
    status = HTTPStatus.UNAUTHORIZED


class HashingFailureError(InfrastructureError):
    pass


class StorageFailureError(InfrastructureError):
    pass


class SessionConflictError(StorageFailureError):
    """A session row for the username already exists."""
