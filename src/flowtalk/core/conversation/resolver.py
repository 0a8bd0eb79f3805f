"""StepResolver - materialize vertices into steps on demand."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from flowtalk.core.conversation.step import Step, _maybe_await
from flowtalk.core.errors import MissingSubroutineSource, ModuleResolutionError, UnknownVertex
from flowtalk.core.flow.model import Flow, Vertex

if TYPE_CHECKING:
    from flowtalk.core.conversation.conversation import Conversation

logger = logging.getLogger(__name__)

# Props consumed by the resolver rather than passed to the step factory
_RESERVED_PROPS = ("module", "key")


class StepResolver:
    """Resolves vertex ids of one conversation's flow into fresh steps.

    Leaf vertices run their behaviour factory with the vertex props plus a
    ``conversation`` back-reference. Subroutine vertices become nested
    conversations sharing the owner's observer list.

    Args:
        conversation: The conversation owning the flow. Used as the
            ``conversation`` prop and as the parent of subroutines.
    """

    def __init__(self, conversation: Conversation) -> None:
        self._conversation = conversation

    @property
    def flow(self) -> Flow:
        return self._conversation.flow

    async def resolve(self, vertex_id: str) -> Step:
        """Instantiate the step for a vertex.

        Raises:
            UnknownVertex: If the id is not part of the flow.
            MissingSubroutineSource: If a subroutine has no flow or src.
            ModuleResolutionError: If a string module reference is unknown.
        """
        vertex = self.flow.vertices.get(vertex_id)
        if vertex is None:
            raise UnknownVertex(vertex_id)

        if vertex.is_subroutine:
            hook = await self._subroutine(vertex)
        else:
            hook = await self._module(vertex)

        logger.debug("step_resolved: step=%s, hook=%s", vertex_id, type(hook).__name__)
        return Step(id=vertex_id, edges=self.flow.edges_for(vertex_id), hook=hook)

    async def resolve_optional(self, vertex_id: str) -> Step | None:
        """Like :meth:`resolve`, but None for ids outside the flow."""
        try:
            return await self.resolve(vertex_id)
        except UnknownVertex:
            return None

    def _props(self, vertex: Vertex) -> dict[str, Any]:
        props = {k: v for k, v in vertex.props.items() if k not in _RESERVED_PROPS}
        props["conversation"] = self._conversation
        return props

    async def _module(self, vertex: Vertex) -> Any:
        module = vertex.props.get("module")
        if module is None:
            return None

        if isinstance(module, str):
            key = vertex.props.get("key")
            resolver = self._conversation.module_resolver
            if resolver is None:
                raise ModuleResolutionError(module, key, "no module resolver configured")
            factory = resolver.resolve(module, key)
        elif callable(module):
            factory = module
        else:
            raise ModuleResolutionError(repr(module), None, "module is neither callable nor a name")

        return await _maybe_await(factory(**self._props(vertex)))

    async def _subroutine(self, vertex: Vertex) -> Conversation:
        from flowtalk.core.conversation.conversation import Conversation

        nested = vertex.props.get("flow")
        src = vertex.props.get("src") or vertex.link
        if not nested and not src:
            raise MissingSubroutineSource(vertex.id)

        props = self._props(vertex)
        parent = props.pop("conversation")
        props.pop("flow", None)
        props.pop("src", None)

        if isinstance(nested, Mapping):
            nested = Flow.from_dict(nested)

        return await Conversation.create(
            flow=nested or None,
            src=None if nested else src,
            parent=parent,
            observers=parent.observers,
            start=props.pop("start", None),
            module_resolver=parent.module_resolver,
            loader=parent.loader,
            context=props,
        )
