# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig


from .logger import (
    clear_correlation_id,
    get_correlation_id,
    logger,
    set_correlation_id,
    setup_logging,
    token_hint,
)
from .sensitive_filter import sanitize_message

__all__ = [
    "clear_correlation_id",
    "get_correlation_id",
    "logger",
    "sanitize_message",
    "set_correlation_id",
    "setup_logging",
    "token_hint",
]
