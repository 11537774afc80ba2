# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from typing import Any

SENSITIVE_PATTERNS = [
    # Argon2 encoded hashes: $argon2id$v=19$m=...,t=...,p=...$salt$digest
    (r"\$argon2(?:id|i|d)\$v=\d+\$[^\s'\"]+", r"$argon2$***REDACTED***"),

    # Tokens
    (r"(bearer\s+)([a-zA-Z0-9_\-\.]{20,})", r"\1***REDACTED***", re.IGNORECASE),
    (r"(refresh[_-]?token\s*[:=]\s*['\"]?)([a-zA-Z0-9]{20,})(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),
    (r"(token\s*[:=]\s*['\"]?)([a-zA-Z0-9_\-\.]{20,})(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),

    # Passwords
    (r"(password(?:_hash)?\s*[:=]\s*['\"]?)([^'\"\s,)]{1,})(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),
    (r"(passwd\s*[:=]\s*['\"]?)([^'\"\s,)]{1,})(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),

    # Database URLs with credentials
    (r"(postgres(?:ql)?(?:\+\w+)?|mysql(?:\+\w+)?)://([^:/@]+):([^@]+)@", r"\1://\2:***REDACTED***@"),

    # Email addresses (partial masking)
    (r"([a-zA-Z0-9._%+-]+)@([a-zA-Z0-9.-]+\.[a-zA-Z]{2,})", r"***@\2"),
]

_COMPILED = [
    (re.compile(entry[0], entry[2] if len(entry) > 2 else 0), entry[1])
    for entry in SENSITIVE_PATTERNS
]


def sanitize_message(message: str) -> str:
    sanitized = message
    for pattern, replacement in _COMPILED:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def sanitize_record(record: dict[str, Any]) -> bool:
    if "message" in record:
        record["message"] = sanitize_message(record["message"])
    return True
