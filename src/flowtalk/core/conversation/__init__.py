"""Conversation - navigate a flowchart one step at a time.

Classes:
    Conversation: Navigable, observable walk over a flow.
    ConversationState: Conversation lifecycle states.
    Continuation: The suspendable walk a conversation drives.
    StepResolver: Materializes vertices into steps.
    Step: A visited vertex (hook + edges).
    StepHook: Capability contract of a step's behaviour.
    NavigableHook: A hook that is itself a conversation.
    Action: A navigation choice offered while rendering.
    ModuleRegistry: Explicit registry of step factories.
    ImportResolver: Opt-in importlib module resolution.
    ChainResolver: Try several module resolvers in order.

Example:
    >>> from flowtalk.core.conversation import ModuleRegistry, conversation
    >>>
    >>> registry = ModuleRegistry().register("ask-name", AskName)
    >>> convo = await conversation(flow=flow, registry=registry)
    >>> await convo.is_ready()
    >>> await convo.render({"renderer": print})
"""

from flowtalk.core.conversation.continuation import Continuation
from flowtalk.core.conversation.conversation import (
    Conversation,
    ConversationState,
    conversation,
    default_resolver,
)
from flowtalk.core.conversation.registry import (
    ChainResolver,
    ImportResolver,
    ModuleRegistry,
    ModuleResolver,
)
from flowtalk.core.conversation.resolver import StepResolver
from flowtalk.core.conversation.step import Action, NavigableHook, Observer, Step, StepHook

__all__ = [
    "Action",
    "ChainResolver",
    "Continuation",
    "Conversation",
    "ConversationState",
    "ImportResolver",
    "ModuleRegistry",
    "ModuleResolver",
    "NavigableHook",
    "Observer",
    "Step",
    "StepHook",
    "StepResolver",
    "conversation",
    "default_resolver",
]
