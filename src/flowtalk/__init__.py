"""flowtalk - flowchart-driven conversations.

flowtalk turns a parsed flowchart into a navigable, stateful conversation:
each vertex is a step that decides when it is ready and when it is
complete, edges are the ways forward, and a subroutine vertex is a whole
nested conversation.

Layers:
    core/       Graph model and navigation engine
    frontends/  Command-line tooling for flow files

Quick Start:
    >>> from flowtalk import ModuleRegistry, conversation
    >>>
    >>> class AskName:
    ...     def __init__(self, **props):
    ...         self.name = None
    ...     def is_ready(self):
    ...         return True
    ...     def is_complete(self, throw_on_error=False):
    ...         return bool(self.name)
    ...     def render(self, props=None):
    ...         return "What is your name?"
    >>>
    >>> registry = ModuleRegistry().register("ask-name", AskName)
    >>> convo = await conversation(src="signup.json", registry=registry)
    >>> convo.subscribe(lambda action, step: print(action, step))
    >>> await convo.is_ready()
    start Step(id='name')
"""

from flowtalk.__version__ import __version__
from flowtalk.core import (
    Action,
    Conversation,
    ConversationError,
    ConversationState,
    Edge,
    Flow,
    FlowLoader,
    FlowLoadError,
    FlowtalkConfig,
    FlowValidationError,
    GraphTypeMismatch,
    MissingSubroutineSource,
    ModuleRegistry,
    ModuleResolutionError,
    NavigableHook,
    NoStartFound,
    Observer,
    Step,
    StepHook,
    UnknownVertex,
    Vertex,
    VertexEdges,
    VertexKind,
    conversation,
)

__all__ = [
    "__version__",
    # Flow
    "Edge",
    "Flow",
    "FlowLoader",
    "Vertex",
    "VertexEdges",
    "VertexKind",
    # Conversation
    "Action",
    "Conversation",
    "ConversationState",
    "ModuleRegistry",
    "NavigableHook",
    "Observer",
    "Step",
    "StepHook",
    "conversation",
    # Config
    "FlowtalkConfig",
    # Errors
    "ConversationError",
    "FlowLoadError",
    "FlowValidationError",
    "GraphTypeMismatch",
    "MissingSubroutineSource",
    "ModuleResolutionError",
    "NoStartFound",
    "UnknownVertex",
]
