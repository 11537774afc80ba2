# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .services.password_hashing import Argon2PasswordHasher
from .services.session_service import DEFAULT_SESSION_DURATION, SessionService
from .services.token_generator import DEFAULT_TOKEN_LENGTH, SecretsTokenGenerator

__all__ = [
    "Argon2PasswordHasher",
    "DEFAULT_SESSION_DURATION",
    "DEFAULT_TOKEN_LENGTH",
    "SecretsTokenGenerator",
    "SessionService",
]
