"""Debounced, cancellable lookups with a per-kind generation counter.

Every trigger bumps the kind's generation. A call remembers the generation it
was started with and may only write its result if that is still the current
generation when it completes; otherwise the result is dropped. This holds
under any network reordering, since nothing depends on arrival order.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from geocontacts.application import lookup_machine
from geocontacts.application.lookup_machine import IDLE, get_machine

logger = logging.getLogger(__name__)

DEFAULT_QUIET_PERIOD = 0.5


class LookupKind(str, Enum):
    ADDRESS_SEARCH = "address_search"
    POSTAL_CODE = "postal_code"
    NATIONAL_ID_UNIQUE = "national_id_unique"
    EMAIL_UNIQUE = "email_unique"


class LookupOutcome(str, Enum):
    APPLIED = "applied"
    SUPERSEDED = "superseded"
    FAILED = "failed"


@dataclass
class PendingLookup:
    """Mutable per-kind bookkeeping. Only the newest generation may apply."""

    kind: LookupKind
    generation: int = 0
    state: str = IDLE
    loading: bool = False
    cancelled: bool = False
    timer: asyncio.TimerHandle | None = None


class LookupController:
    """Schedules lookups per kind and discards stale results.

    Single-threaded: all methods must be called from the running event loop.
    """

    def __init__(
        self,
        quiet_period: float = DEFAULT_QUIET_PERIOD,
        *,
        machine: dict | None = None,
    ) -> None:
        self.quiet_period = quiet_period
        self._machine = machine if machine is not None else get_machine()
        self._pending = {kind: PendingLookup(kind=kind) for kind in LookupKind}
        self._tasks: set[asyncio.Task] = set()

    def pending(self, kind: LookupKind) -> PendingLookup:
        return self._pending[kind]

    def generation(self, kind: LookupKind) -> int:
        return self._pending[kind].generation

    def state(self, kind: LookupKind) -> str:
        return self._pending[kind].state

    def is_loading(self, kind: LookupKind) -> bool:
        return self._pending[kind].loading

    def is_busy(self, kind: LookupKind) -> bool:
        """True while a call is scheduled or in flight for this kind."""
        p = self._pending[kind]
        return p.loading or p.timer is not None

    def schedule(
        self,
        kind: LookupKind,
        call: Callable[[], Awaitable[Any]],
        apply: Callable[[Any], None],
        *,
        on_error: Callable[[Exception], None] | None = None,
        debounce: bool = True,
    ) -> int:
        """Arm a lookup and return its generation.

        With debounce=True the call starts after quiet_period seconds unless
        another schedule() for the same kind arrives first. With
        debounce=False (field-exit triggers) it starts immediately.
        """
        loop = asyncio.get_running_loop()
        p = self._pending[kind]
        if p.timer is not None:
            p.timer.cancel()
            p.timer = None
        p.generation += 1
        p.cancelled = False
        generation = p.generation
        self._advance(p, "TRIGGER")
        if debounce:
            p.timer = loop.call_later(
                self.quiet_period, self._fire, kind, generation, call, apply, on_error
            )
        else:
            self._fire(kind, generation, call, apply, on_error)
        return generation

    def cancel(self, kind: LookupKind) -> None:
        """Discard any scheduled or in-flight call for this kind.

        In-flight calls keep running on the transport; their result is dropped.
        """
        p = self._pending[kind]
        if p.timer is not None:
            p.timer.cancel()
            p.timer = None
        p.generation += 1
        p.cancelled = True
        p.loading = False
        self._advance(p, "CANCEL")

    def cancel_all(self) -> None:
        for kind in LookupKind:
            self.cancel(kind)

    async def aclose(self) -> None:
        """Cancel every kind and stop in-flight calls. Use before closing the transport."""
        self.cancel_all()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.difference_update(tasks)

    async def drain(self) -> list[LookupOutcome]:
        """Wait for every started call to finish and return their outcomes."""
        outcomes: list[LookupOutcome] = []
        while self._tasks:
            tasks = list(self._tasks)
            outcomes.extend(await asyncio.gather(*tasks))
            self._tasks.difference_update(tasks)
        return outcomes

    def _fire(self, kind, generation, call, apply, on_error) -> None:
        p = self._pending[kind]
        if generation != p.generation:
            return
        p.timer = None
        p.loading = True
        self._advance(p, "FIRE")
        task = asyncio.get_running_loop().create_task(
            self._run(kind, generation, call, apply, on_error)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, kind, generation, call, apply, on_error) -> LookupOutcome:
        p = self._pending[kind]
        try:
            result = await call()
        except Exception as exc:
            if generation != p.generation:
                logger.debug("%s gen %d failed after being superseded", kind.value, generation)
                return LookupOutcome.SUPERSEDED
            p.loading = False
            self._advance(p, "FAIL")
            logger.debug("%s gen %d failed: %s", kind.value, generation, exc)
            if on_error is not None:
                on_error(exc)
            return LookupOutcome.FAILED
        if generation != p.generation:
            logger.debug(
                "%s gen %d superseded by gen %d", kind.value, generation, p.generation
            )
            return LookupOutcome.SUPERSEDED
        p.loading = False
        self._advance(p, "RESOLVE")
        apply(result)
        return LookupOutcome.APPLIED

    def _advance(self, p: PendingLookup, event: str) -> None:
        next_state = lookup_machine.transition(self._machine, p.state, event)
        if next_state is not None:
            logger.debug("%s: %s -> %s (%s)", p.kind.value, p.state, next_state, event)
            p.state = next_state
