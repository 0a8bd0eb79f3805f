"""Continuation - the suspendable walk behind a conversation.

The walk is an async generator driven with ``asend``. It suspends only
at the hook queries it awaits (``is_complete``, ``is_ready``) and at step
resolution, and yields the step the conversation should sit on next:

    advance(target=None)
        current incomplete     -> yield current (no movement)
        current complete       -> breadcrumbs.append(current)
            target given       -> yield resolve(target)
            otherwise          -> yield first outgoing end whose is_ready() is true
            nothing reachable  -> generator finishes (exhausted until rewound)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass

from flowtalk.core.conversation.step import Step

logger = logging.getLogger(__name__)

Resolve = Callable[[str], Awaitable["Step | None"]]


@dataclass(frozen=True)
class _Failure:
    """A resolution error carried out of the walk without finishing it."""

    error: Exception


class Continuation:
    """Stateful, single-threaded walk over a flow's steps.

    Only one :meth:`advance` runs at a time; concurrent callers queue on
    an internal lock and see ``current`` as it was before the running
    advance resumes.

    Args:
        resolve: Resolves a vertex id to a fresh step, or None when the id
            is not part of the flow.

    Example:
        >>> walk = Continuation(resolver.resolve_optional)
        >>> await walk.prime(start_step)
        >>> step = await walk.advance()        # follow the first ready edge
        >>> step = await walk.advance("help")  # explicit jump
    """

    def __init__(self, resolve: Resolve) -> None:
        self._resolve = resolve
        self._lock = asyncio.Lock()
        self._walk: AsyncGenerator[Step | _Failure, str | None] = self._run()
        self._primed = False
        self._restart = False

        self.breadcrumbs: list[Step] = []
        self.current: Step | None = None
        self.exhausted = False

    @property
    def primed(self) -> bool:
        return self._primed

    async def prime(self, start: Step) -> Step:
        """Start the walk on its first step.

        Raises:
            RuntimeError: If the walk was already primed.
        """
        if self._primed:
            raise RuntimeError("Continuation already primed")
        self.current = start
        self._primed = True
        return await self._walk.asend(None)

    async def advance(self, target: str | None = None) -> Step | None:
        """Move to the next step if the current one is complete.

        Args:
            target: Explicit vertex to jump to instead of following edges.

        Returns:
            The step now current (unchanged when incomplete), or None when
            the walk is exhausted.

        Raises:
            RuntimeError: If called before :meth:`prime`.
        """
        if not self._primed:
            raise RuntimeError("Continuation not primed")

        async with self._lock:
            if self.exhausted:
                return None
            if self._restart:
                self._restart = False
                await self._walk.asend(None)
            try:
                result = await self._walk.asend(target)
            except StopAsyncIteration:
                self.exhausted = True
                logger.debug("continuation_exhausted: breadcrumbs=%d", len(self.breadcrumbs))
                return None

        if isinstance(result, _Failure):
            raise result.error
        return result

    def rewind(self) -> Step | None:
        """Pop the most recent breadcrumb and make it current.

        The next :meth:`advance` resumes from the restored step, even after
        the walk was exhausted.

        Returns:
            The restored step, or None when there is no history.
        """
        if not self.breadcrumbs:
            return None
        self.current = self.breadcrumbs.pop()
        if self.exhausted:
            self._walk = self._run()
            self._restart = True
            self.exhausted = False
        return self.current

    def finish(self) -> None:
        """Move the current step into the history and leave no current step."""
        if self.current is not None:
            self.breadcrumbs.append(self.current)
            self.current = None

    async def _run(self) -> AsyncGenerator[Step | _Failure, str | None]:
        target = yield self.current

        while self.current is not None:
            step = self.current

            if not await step.check_complete():
                target = yield step
                continue

            self.breadcrumbs.append(step)

            try:
                if target is not None:
                    upcoming = await self._resolve(target)
                else:
                    upcoming = await self._first_ready(step)
            except Exception as e:
                # Leave the walk where it was so navigation can be retried
                self.breadcrumbs.pop()
                target = yield _Failure(e)
                continue

            if upcoming is None:
                # current stays on the last step, outside the history
                self.breadcrumbs.pop()
                return

            logger.debug(
                "continuation_advance: from=%s, to=%s, explicit=%s",
                step.id,
                upcoming.id,
                target is not None,
            )
            self.current = upcoming
            target = yield upcoming

    async def _first_ready(self, step: Step) -> Step | None:
        for edge in step.edges.outgoing:
            candidate = await self._resolve(edge.end)
            if candidate is None:
                continue
            if await candidate.check_ready():
                return candidate
        return None

    def __repr__(self) -> str:
        current = self.current.id if self.current else None
        return f"Continuation(current={current!r}, breadcrumbs={len(self.breadcrumbs)})"
