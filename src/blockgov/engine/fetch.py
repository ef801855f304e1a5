"""
BlockGov Fetch Guard

Epoch guard for asynchronous fetches that feed shared workspace state.

When filters or queues change quickly, several fetches for the same view
can be in flight at once and complete in any order. Each fetch takes a
token when it starts; only the token of the most recently started fetch
for a scope may apply its result. Cancelling a scope (closing a tab)
invalidates every outstanding token for it.

Usage:
    guard = FetchGuard()

    applied = await guard.run(
        "inbox",
        store.list(filters),
        apply=lambda cases: cache.update(inbox=cases),
    )
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FetchToken:
    """Identifies one fetch: its scope and the epoch it started in."""
    scope: str
    epoch: int


class FetchGuard:
    """Tracks the current epoch of every fetch scope."""

    def __init__(self) -> None:
        self._epochs: dict[str, int] = {}

    def begin(self, scope: str) -> FetchToken:
        """Start a fetch, superseding any still in flight for the scope."""
        epoch = self._epochs.get(scope, 0) + 1
        self._epochs[scope] = epoch
        return FetchToken(scope=scope, epoch=epoch)

    def is_current(self, token: FetchToken) -> bool:
        return self._epochs.get(token.scope) == token.epoch

    def cancel(self, scope: str) -> None:
        """Invalidate every outstanding fetch for a scope."""
        if scope in self._epochs:
            self._epochs[scope] += 1
            logger.debug("Cancelled in-flight fetches", extra={"tab_id": scope})

    async def run(
        self,
        scope: str,
        fetch: Awaitable[T],
        apply: Callable[[T], None],
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> bool:
        """
        Await a fetch and apply its result only if it is still current.

        Returns True when the result was applied. A stale result is dropped
        and a stale error is swallowed; both are logged at DEBUG. An error
        from a current fetch goes to ``on_error`` if given, else propagates.
        """
        token = self.begin(scope)
        try:
            result = await fetch
        except Exception as exc:
            if not self.is_current(token):
                logger.debug(
                    "Discarded error from stale fetch (epoch %d): %s",
                    token.epoch,
                    exc,
                    extra={"tab_id": scope},
                )
                return False
            if on_error is None:
                raise
            on_error(exc)
            return False

        if not self.is_current(token):
            logger.debug(
                "Discarded stale fetch result (epoch %d)",
                token.epoch,
                extra={"tab_id": scope},
            )
            return False
        apply(result)
        return True
