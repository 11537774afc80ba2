# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Database unit of work and storage error translation."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from roadmap_auth.domain.users.exceptions import StorageFailureError
from roadmap_auth.shared.logging import logger


@dataclass(slots=True)
class SqlAlchemyUnitOfWork(AbstractContextManager):
    """One transaction: commit on clean exit, rollback on any exception."""

    session_factory: Callable[[], Session]
    _session: Session | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self._session = self.session_factory()
        logger.debug("uow: session opened")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        assert self._session is not None
        try:
            if exc:
                logger.debug(f"uow: rollback due to {exc_type.__name__}")
                self._session.rollback()
            else:
                self._session.commit()
                logger.debug("uow: committed")
        except Exception:
            logger.debug("uow: commit failed, rolling back")
            self._session.rollback()
            raise
        finally:
            self._session.close()
            self._session = None

    @property
    def session(self) -> Session:
        if self._session is None:
            msg = "UnitOfWork session accessed before entering context"
            raise RuntimeError(msg)
        return self._session


@contextmanager
def unit_of_work_scope(factory: Callable[[], Session]) -> Iterator[Session]:
    with SqlAlchemyUnitOfWork(factory) as uow:
        yield uow.session


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Translate SQLAlchemy failures into ``StorageFailureError``.

    ``IntegrityError`` passes through untouched; stores map it to the
    domain conflict that fits the table.
    """

    try:
        yield
    except IntegrityError:
        raise
    except SQLAlchemyError as exc:
        # str(exc) embeds bound parameters (tokens, hashes); log the driver message only
        logger.error(f"storage: {action} failed: {type(exc).__name__}: {getattr(exc, 'orig', None)}")
        raise StorageFailureError(f"{action} failed") from exc
