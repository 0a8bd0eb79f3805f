"""Step - runtime materialization of a flow vertex.

A step pairs a vertex's behaviour hook with its adjacent edges. Hooks are
capability objects: a leaf hook answers readiness, completion and render;
a navigable hook (a nested conversation) can also be driven forward and
back and observed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from flowtalk.core.flow.model import Edge, VertexEdges

logger = logging.getLogger(__name__)


@runtime_checkable
class StepHook(Protocol):
    """Capability contract of a step's behaviour module.

    Methods may be plain or async; the engine awaits coroutine results.
    """

    def is_ready(self) -> Any: ...

    def is_complete(self, throw_on_error: bool = False) -> Any: ...

    def render(self, props: dict[str, Any] | None = None) -> Any: ...


@runtime_checkable
class NavigableHook(StepHook, Protocol):
    """A hook that is itself a conversation (subroutine)."""

    def continue_(self, id: str | None = None, from_child: bool = False) -> Any: ...

    def back(self, from_child: bool = False) -> Any: ...

    def subscribe(self, observer: Observer) -> None: ...

    def unsubscribe(self, observer: Observer) -> None: ...


@dataclass
class Step:
    """A visited vertex.

    Created fresh every time a vertex is visited; a module may be stateful,
    so steps are never reused across visits.

    Attributes:
        id: The vertex id.
        edges: Incoming and outgoing edges of the vertex.
        hook: The instantiated behaviour, or None for a vertex without one.
    """

    id: str
    edges: VertexEdges = field(default_factory=VertexEdges)
    hook: Any = None

    @property
    def is_subroutine(self) -> bool:
        """Whether the hook is a nested conversation."""
        return isinstance(self.hook, NavigableHook)

    async def check_ready(self) -> bool:
        """Query the hook's readiness. Hooks without the capability are ready."""
        is_ready = getattr(self.hook, "is_ready", None)
        if is_ready is None:
            return True
        return bool(await _maybe_await(is_ready()))

    async def check_complete(self, throw_on_error: bool = False) -> bool:
        """Query the hook's completion.

        Hooks without the capability are complete. With ``throw_on_error``
        unset, a failing check counts as "not complete".
        """
        is_complete = getattr(self.hook, "is_complete", None)
        if is_complete is None:
            return True
        try:
            return bool(await _maybe_await(is_complete(throw_on_error)))
        except Exception as e:
            if throw_on_error:
                raise
            logger.debug("step_complete_check_failed: step=%s, error=%s", self.id, e)
            return False

    def __repr__(self) -> str:
        return f"Step(id={self.id!r})"


@dataclass(frozen=True)
class Action:
    """A navigation choice offered while rendering a step.

    Attributes:
        id: Target vertex id.
        label: Edge label.
        type: "primary" for normal strokes, "secondary" otherwise.
    """

    id: str
    label: str
    type: str

    @classmethod
    def from_edge(cls, edge: Edge) -> Action:
        return cls(
            id=edge.end,
            label=edge.text,
            type="primary" if edge.stroke == "normal" else "secondary",
        )

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "label": self.label, "type": self.type}


Observer = Callable[[str, "Step | None"], None]


async def _maybe_await(result: Any) -> Any:
    if asyncio.iscoroutine(result) or isinstance(result, asyncio.Future):
        return await result
    return result
