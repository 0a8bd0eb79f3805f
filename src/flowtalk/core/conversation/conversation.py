"""Conversation - navigable, observable walk over a flow."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum, auto
from typing import Any

from flowtalk.core.config import FlowtalkConfig
from flowtalk.core.conversation.continuation import Continuation
from flowtalk.core.conversation.registry import (
    ChainResolver,
    ImportResolver,
    ModuleRegistry,
    ModuleResolver,
)
from flowtalk.core.conversation.resolver import StepResolver
from flowtalk.core.conversation.step import Action, NavigableHook, Observer, Step, _maybe_await
from flowtalk.core.errors import GraphTypeMismatch, NoStartFound
from flowtalk.core.flow.loader import FlowLoader, Loader
from flowtalk.core.flow.model import Flow

logger = logging.getLogger(__name__)


class ConversationState(Enum):
    """Conversation lifecycle states.

    State transitions:
        INITIALIZING -> READY <-> NAVIGATING -> DONE
    """

    INITIALIZING = auto()  # Start step not found yet
    READY = auto()  # Sitting on a step, waiting for the caller
    NAVIGATING = auto()  # continue_/back in flight
    DONE = auto()  # Walk exhausted with no parent to bubble to


class Conversation:
    """A stateful walk over a flow of steps.

    Steps decide their own readiness and completion; ``continue_`` moves
    past a completed step along the first ready outgoing edge, ``back``
    returns to the previous step. A subroutine vertex is itself a nested
    Conversation: navigation is delegated down into it while it has steps
    left, and bubbles back out to the parent when it runs dry.

    Every transition is broadcast to the observers as ``(action, step)``
    with action one of ``"start"``, ``"continue"``, ``"back"``, ``"done"``
    or an explicit target id. Nested conversations share the root's
    observer list, so one subscription sees the whole tree.

    The start step is located lazily, on first use, exactly once.

    Args:
        flow: The conversation graph.
        parent: Enclosing conversation when this one is a subroutine.
        observers: Observer list to share. A new list when omitted.
        start: Explicit start vertex, adopted without a readiness check.
        module_resolver: Resolves string module references.
        loader: Loads subroutine flows given by ``src``.
        config: Runtime configuration.
        context: Extra vertex props handed to a subroutine.

    Raises:
        GraphTypeMismatch: If the flow is not a conversation graph.

    Example:
        >>> convo = await conversation(flow=flow, module_resolver=registry)
        >>> convo.subscribe(lambda action, step: print(action, step))
        >>> await convo.is_ready()
        start Step(id='name')
        >>> await convo.continue_()
        continue Step(id='address')
    """

    def __init__(
        self,
        flow: Flow,
        parent: Conversation | None = None,
        observers: list[Observer] | None = None,
        start: str | None = None,
        module_resolver: ModuleResolver | None = None,
        loader: Loader | None = None,
        config: FlowtalkConfig | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        if not isinstance(flow, Flow) or not flow.is_conversation:
            raise GraphTypeMismatch(getattr(flow, "type", None))

        self._flow = flow
        self._parent = parent
        self._observers: list[Observer] = observers if observers is not None else []
        self._start_id = start
        self._config = config or (parent.config if parent else FlowtalkConfig())
        self._module_resolver = module_resolver
        self._loader: Loader = loader or FlowLoader(self._config)
        self.context: dict[str, Any] = context or {}

        self._resolver = StepResolver(self)
        self._walk = Continuation(self._resolver.resolve_optional)
        self._start_task: asyncio.Future[Step] | None = None
        self._state = ConversationState.INITIALIZING
        self._bubbled = False

    @classmethod
    async def create(
        cls,
        flow: Flow | dict[str, Any] | None = None,
        src: str | None = None,
        **kwargs: Any,
    ) -> Conversation:
        """Create a conversation from a flow, a flow document, or a source.

        Args:
            flow: Flow object or raw flow document.
            src: Locator loaded through the loader when no flow is given.
            **kwargs: Passed to the constructor.

        Raises:
            GraphTypeMismatch: If neither a conversation flow nor src is given.
            FlowLoadError: If ``src`` cannot be loaded.
            FlowValidationError: If the document is invalid.
        """
        if isinstance(flow, dict):
            flow = Flow.from_dict(flow)

        if flow is None and src:
            loader = kwargs.get("loader")
            if loader is None:
                parent = kwargs.get("parent")
                config = kwargs.get("config") or (parent.config if parent else None)
                loader = FlowLoader(config)
                kwargs["loader"] = loader
            flow = await loader.load(src)

        return cls(flow=flow, **kwargs)  # type: ignore[arg-type]

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def flow(self) -> Flow:
        return self._flow

    @property
    def parent(self) -> Conversation | None:
        return self._parent

    @property
    def observers(self) -> list[Observer]:
        """The observer list, shared by reference with nested conversations."""
        return self._observers

    @property
    def breadcrumbs(self) -> list[Step]:
        """Completed steps, oldest first."""
        return self._walk.breadcrumbs

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def config(self) -> FlowtalkConfig:
        return self._config

    @property
    def module_resolver(self) -> ModuleResolver | None:
        return self._module_resolver

    @property
    def loader(self) -> Loader:
        return self._loader

    # =========================================================================
    # Navigation
    # =========================================================================

    async def continue_(self, id: str | None = None, from_child: bool = False) -> Step | None:
        """Navigate to the next step, if the current step is complete.

        Args:
            id: Explicit vertex to jump to instead of following edges.
            from_child: Set by a nested conversation bubbling up; skips
                delegating back down into it.

        Returns:
            The step now current (the same step when nothing moved), or
            None once the conversation is done.
        """
        if self._state is ConversationState.DONE:
            return None

        # Set when a nested conversation bubbles up into this one
        self._bubbled = from_child
        step = await self._current()

        if not from_child and step is not None and isinstance(step.hook, NavigableHook):
            child_next = await step.hook.continue_(id)
            # The bubbled call already advanced this conversation
            if child_next is not None or self._bubbled:
                return child_next

        self._state = ConversationState.NAVIGATING
        try:
            upcoming = await self._walk.advance(id)
        finally:
            self._state = ConversationState.READY

        if upcoming is None:
            if self._parent is not None:
                logger.debug("conversation_bubble_up: from=%s", step.id if step else None)
                return await self._parent.continue_(id, from_child=True)

            self._walk.finish()
            self._state = ConversationState.DONE
            return self._notify("done", None)

        return self._notify(id or "continue", upcoming)

    async def back(self, from_child: bool = False) -> Step | None:
        """Navigate to the previous step.

        With no history left, steps out into the parent conversation; at
        the root this is a no-op returning None.

        Args:
            from_child: Set by a nested conversation bubbling up.
        """
        step = await self._current()

        if not from_child and step is not None and isinstance(step.hook, NavigableHook):
            return await step.hook.back()

        if not self._walk.breadcrumbs:
            if self._parent is not None:
                return await self._parent.back(from_child=True)
            return None

        previous = self._walk.rewind()
        if self._state is ConversationState.DONE:
            self._state = ConversationState.READY
        return self._notify("back", previous)

    async def get(self, id: str | None = None) -> Step | None:
        """Get the current step, or a fresh instance of any step.

        Resolving by id does not change the navigation state.

        Returns:
            The step, or None if the id is not part of the flow.
        """
        if not id:
            return await self._current()
        return await self._resolver.resolve_optional(id)

    # =========================================================================
    # StepHook capabilities
    # =========================================================================

    async def is_ready(self) -> bool:
        """Whether a current step exists.

        Raises:
            NoStartFound: If no entry vertex was ready.
        """
        return await self._current() is not None

    async def is_complete(self, throw_on_error: bool = False) -> bool:
        """Check every step in the history, plus the current one.

        Completion is queried live on every call and for every step, so a
        step that has since become incomplete fails the whole check.

        Args:
            throw_on_error: Propagate step validation errors instead of
                counting them as incomplete.
        """
        current = await self._current()
        steps = [current, *self._walk.breadcrumbs] if current is not None else self._walk.breadcrumbs

        results = [await step.check_complete(throw_on_error) for step in steps]
        return all(results)

    async def render(self, props: dict[str, Any] | None = None) -> Any:
        """Render the current step.

        The render context holds ``props`` plus ``actions`` (choices from
        the outgoing edges) and async ``back``/``continue`` helpers that
        return the hook of the step reached. A callable ``renderer`` in
        ``props`` takes over from the step's own ``render``.
        """
        step = await self._current()
        props = props or {}

        async def go_back() -> Any:
            reached = await self.back()
            return reached.hook if reached else None

        async def go_on(id: str | None = None) -> Any:
            reached = await self.continue_(id)
            return reached.hook if reached else None

        context: dict[str, Any] = {
            **props,
            "actions": [
                Action.from_edge(edge)
                for edge in (step.edges.outgoing if step else ())
                if edge.type == "arrow_point"
            ],
            "back": go_back,
            "continue": go_on,
        }

        renderer = props.get("renderer")
        if callable(renderer):
            return await _maybe_await(renderer(context))

        render = getattr(step.hook, "render", None) if step else None
        if render is None:
            return None
        return await _maybe_await(render(context))

    # =========================================================================
    # Observers
    # =========================================================================

    def subscribe(self, observer: Observer) -> None:
        """Register an observer here and on every enclosing conversation."""
        if observer not in self._observers:
            self._observers.append(observer)
        if self._parent is not None:
            self._parent.subscribe(observer)

    def unsubscribe(self, observer: Observer) -> None:
        """Remove an observer here and on every enclosing conversation."""
        if observer in self._observers:
            self._observers.remove(observer)
        if self._parent is not None:
            self._parent.unsubscribe(observer)

    def _notify(self, action: str, step: Step | None) -> Step | None:
        # A subroutine's own start is covered by the parent's transition
        if action == "start" and self._parent is not None:
            return step

        logger.debug("conversation_%s: step=%s", action, step.id if step else None)
        for observer in list(self._observers):
            observer(action, step)
        return step

    # =========================================================================
    # Start
    # =========================================================================

    async def _current(self) -> Step | None:
        if self._start_task is None:
            self._start_task = asyncio.ensure_future(self._find_start(self._start_id))
        await self._start_task
        return self._walk.current

    async def _find_start(self, explicit: str | None) -> Step:
        step: Step | None = None

        if explicit:
            step = await self._resolver.resolve_optional(explicit)

        if step is None:
            for entry_id in self._flow.entry_candidates():
                candidate = await self._resolver.resolve_optional(entry_id)
                if candidate is not None and await candidate.check_ready():
                    step = candidate
                    break

        if step is None:
            logger.debug("conversation_no_start: candidates=%s", self._flow.entry_candidates())
            raise NoStartFound()

        await self._walk.prime(step)
        self._state = ConversationState.READY
        self._notify("start", step)
        return step

    def __repr__(self) -> str:
        current = self._walk.current.id if self._walk.current else None
        return f"Conversation(state={self._state.name}, current={current!r})"


def default_resolver(
    config: FlowtalkConfig, registry: ModuleRegistry | None = None
) -> ModuleResolver | None:
    """Build the module resolver a config asks for.

    The registry always comes first; importlib resolution is appended when
    ``config.allow_imports`` is set.
    """
    resolvers: list[ModuleResolver] = []
    if registry is not None:
        resolvers.append(registry)
    if config.allow_imports:
        resolvers.append(ImportResolver(config.allowed_imports))
    if not resolvers:
        return None
    if len(resolvers) == 1:
        return resolvers[0]
    return ChainResolver(*resolvers)


async def conversation(
    flow: Flow | dict[str, Any] | None = None,
    src: str | None = None,
    registry: ModuleRegistry | None = None,
    config: FlowtalkConfig | None = None,
    **kwargs: Any,
) -> Conversation:
    """Create a conversation from a flowchart.

    Args:
        flow: Flow object or raw flow document.
        src: Flow locator used when no flow is given.
        registry: Step factories for string module references.
        config: Runtime configuration. Read from FLOWTALK_* when omitted.
        **kwargs: Passed to :class:`Conversation`.

    Example:
        >>> convo = await conversation(src="flows/signup.json", registry=registry)
        >>> await convo.is_ready()
        True
    """
    config = config or FlowtalkConfig.from_env()
    kwargs.setdefault("module_resolver", default_resolver(config, registry))
    return await Conversation.create(flow=flow, src=src, config=config, **kwargs)
