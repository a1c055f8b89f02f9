"""Poller state machine: Idle -> Fetching -> Applied | Degraded -> Idle.

At most one fetch is in flight per poller; a tick that fires while one is
running is skipped, not queued. Each fetch is stamped with a generation and
its result is discarded if ``invalidate()`` was called in the meantime.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any, Callable

import structlog

from market_overlay.errors import MalformedResponse, MissingApiKey, UpstreamUnavailable

log = structlog.get_logger("poller")

# Failures that degrade the display; anything else is logged as unexpected first.
PROVIDER_ERRORS = (UpstreamUnavailable, MalformedResponse, MissingApiKey)


class PollState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    APPLIED = "applied"
    DEGRADED = "degraded"


class Poller:
    """Base class. Subclasses implement ``fetch``, ``apply`` and ``on_degraded``."""

    name = "poller"
    error_message = "Error loading data"

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self.clock = clock
        self.state = PollState.IDLE
        self.last_outcome: PollState | None = None
        self.error: str | None = None
        self.last_applied_at: float | None = None
        self.skipped = 0
        self._generation = 0
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def generation(self) -> int:
        return self._generation

    def invalidate(self) -> None:
        """Supersede the in-flight fetch; its result will be dropped."""
        self._generation += 1

    async def fetch(self) -> Any:
        raise NotImplementedError

    async def apply(self, result: Any) -> None:
        raise NotImplementedError

    async def on_degraded(self, exc: BaseException) -> None:
        """Reset the display to its "no data" state."""

    def _set_state(self, state: PollState) -> None:
        self.state = state
        if state in (PollState.APPLIED, PollState.DEGRADED):
            self.last_outcome = state

    async def _degrade(self, exc: BaseException) -> None:
        self.error = self.error_message
        self._set_state(PollState.DEGRADED)
        await self.on_degraded(exc)

    async def tick(self) -> bool:
        """Run one poll cycle. Returns False when skipped or superseded."""
        if self._in_flight:
            self.skipped += 1
            log.info("poll_skipped", poller=self.name, reason="in_flight")
            return False

        self._in_flight = True
        self._generation += 1
        generation = self._generation
        self._set_state(PollState.FETCHING)
        try:
            try:
                result = await self.fetch()
            except PROVIDER_ERRORS as exc:
                if generation != self._generation:
                    log.info("poll_result_discarded", poller=self.name, reason="superseded")
                    return False
                log.warning("poll_degraded", poller=self.name, error=str(exc))
                await self._degrade(exc)
                return True
            except Exception as exc:
                if generation != self._generation:
                    log.info("poll_result_discarded", poller=self.name, reason="superseded")
                    return False
                log.exception("poll_failed", poller=self.name)
                await self._degrade(exc)
                return True

            if generation != self._generation:
                log.info("poll_result_discarded", poller=self.name, reason="superseded")
                return False

            try:
                await self.apply(result)
            except Exception as exc:
                log.exception("poll_apply_failed", poller=self.name)
                await self._degrade(exc)
                return True

            self.error = None
            self.last_applied_at = self.clock()
            self._set_state(PollState.APPLIED)
            return True
        finally:
            self._in_flight = False
            self.state = PollState.IDLE

    def status(self) -> dict[str, Any]:
        return {
            "poller": self.name,
            "state": self.state.value,
            "last_outcome": self.last_outcome.value if self.last_outcome else None,
            "error": self.error,
            "last_applied_at": self.last_applied_at,
            "skipped": self.skipped,
        }
