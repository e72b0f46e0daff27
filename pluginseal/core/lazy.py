"""Once-initialized resource handle.

A ``LazyResource`` wraps a loader (typically an import of a crypto module)
and moves through ``uninitialized -> initializing -> ready | failed``.
Concurrent first-use callers await the same initialization.  A failed
initialization is sticky: later callers get the same error without
retrying the loader.  The failure is logged at debug level only; the
caller that handles the raised error owns the audit entry.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResourceState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class LazyResource(Generic[T]):
    """Load a resource at most once and cache the outcome.

    Parameters
    ----------
    name:
        Label used in log messages.
    loader:
        Zero-argument callable producing the resource.  Exceptions it
        raises move the handle to ``failed``.
    """

    def __init__(self, name: str, loader: Callable[[], T]) -> None:
        self._name = name
        self._loader = loader
        self._state = ResourceState.UNINITIALIZED
        self._value: T | None = None
        self._error: BaseException | None = None
        self._lock: asyncio.Lock | None = None

    @property
    def state(self) -> ResourceState:
        return self._state

    async def get(self) -> T:
        """Return the resource, initializing it on first call.

        Raises
        ------
        Exception
            Whatever the loader raised, on this and every later call.
        """
        if self._state is ResourceState.READY:
            return self._value  # type: ignore[return-value]
        if self._state is ResourceState.FAILED:
            assert self._error is not None
            raise self._error

        # The lock is created lazily so it binds to the running loop.
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if self._state is ResourceState.READY:
                return self._value  # type: ignore[return-value]
            if self._state is ResourceState.FAILED:
                assert self._error is not None
                raise self._error

            self._state = ResourceState.INITIALIZING
            logger.debug("Initializing %s.", self._name)
            try:
                value = self._loader()
            except Exception as exc:
                self._state = ResourceState.FAILED
                self._error = exc
                logger.debug("Failed to initialize %s: %s", self._name, exc)
                raise
            self._value = value
            self._state = ResourceState.READY
            logger.debug("%s ready.", self._name)
            return value
