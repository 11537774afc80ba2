# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .models import UserRow, UserSessionRow
from .session import Base, Database, create_db_engine

__all__ = ["Base", "Database", "UserRow", "UserSessionRow", "create_db_engine"]
