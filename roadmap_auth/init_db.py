# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Convenience entrypoint for creating the users/users_session tables."""

from __future__ import annotations

import argparse

from roadmap_auth.infrastructure.db import Database
from roadmap_auth.shared.config import load_config
from roadmap_auth.shared.logging import logger, setup_logging


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create the credential and session tables")
    parser.add_argument(
        "--database-url",
        default=None,
        help="Override DATABASE_URL for this run",
    )
    parser.add_argument(
        "--drop",
        action="store_true",
        help="Drop existing tables first (destroys all users and sessions)",
    )
    args = parser.parse_args(argv)

    config = load_config()
    setup_logging(config.log_level, debug=config.debug_logging)

    db_config = config.database
    if args.database_url:
        db_config = db_config.model_copy(update={"url": args.database_url})

    database = Database(db_config)
    try:
        if args.drop:
            database.drop_schema()
        database.init_schema()
        logger.info(f"init_db: schema ready on {db_config.url}")
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
