# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .base import AppError, DomainError, InfrastructureError

__all__ = [
    "AppError",
    "DomainError",
    "InfrastructureError",
]
