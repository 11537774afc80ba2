# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Bounded worker pool for CPU-heavy password hashing."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import TypeVar

from roadmap_auth.domain.users.exceptions import HashingFailureError
from roadmap_auth.domain.users.repositories import PasswordHasher
from roadmap_auth.shared.logging import logger

T = TypeVar("T")


class PooledPasswordHasher(PasswordHasher):
    """Runs another hasher on a fixed-size thread pool.

    argon2-cffi releases the GIL while hashing, so a handful of worker
    threads keep login/sign-up bursts from occupying every request thread.
    ``timeout`` bounds how long the caller waits; a timed-out job still runs
    to completion on its worker.
    """

    def __init__(
        self,
        inner: PasswordHasher,
        *,
        max_workers: int = 4,
        default_timeout: float | None = None,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be positive")
        self._inner = inner
        self._default_timeout = default_timeout
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="pwhash"
        )

    def _run(self, op: str, fn: Callable[..., T], *args, timeout: float | None) -> T:
        limit = timeout if timeout is not None else self._default_timeout
        try:
            future = self._executor.submit(fn, *args)
        except RuntimeError as exc:
            raise HashingFailureError("hashing pool is shut down") from exc
        try:
            return future.result(timeout=limit)
        except FuturesTimeoutError as exc:
            future.cancel()
            logger.warning(f"hashing_pool: {op} exceeded {limit:.2f}s")
            raise HashingFailureError(f"{op} timed out", context={"reason": "timeout"}) from exc

    def hash(self, password: str | bytes, *, timeout: float | None = None) -> str:
        return self._run("hash", self._inner.hash, password, timeout=timeout)

    def verify(
        self, password: str | bytes, hashed: str, *, timeout: float | None = None
    ) -> bool:
        return self._run("verify", self._inner.verify, password, hashed, timeout=timeout)

    def needs_rehash(self, hashed: str) -> bool:
        return self._inner.needs_rehash(hashed)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=True)
        logger.debug("hashing_pool: shut down")
