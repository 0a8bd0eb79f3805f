"""Core - the conversation engine.

This module contains no knowledge of:
- Diagram syntax (flows arrive already parsed)
- Rendering technology (render calls are forwarded)
- Where flows come from, beyond an injectable loader

Architecture:
    flow/           Graph model, flow document schema, flow loader
    conversation/   Step resolution, continuation walk, Conversation facade
    config          Runtime configuration
    errors          Error taxonomy
    logging_config  Logging setup

Key Concepts:
    Flow:          Vertices and directed edges of a flowchart
    Step:          A visited vertex: its behaviour hook plus its edges
    Conversation:  Forward/back walk over steps with breadcrumbs
    Subroutine:    A vertex whose behaviour is a nested Conversation
"""

from flowtalk.core.config import FlowtalkConfig
from flowtalk.core.conversation import (
    Action,
    Conversation,
    ConversationState,
    ModuleRegistry,
    NavigableHook,
    Observer,
    Step,
    StepHook,
    conversation,
)
from flowtalk.core.errors import (
    ConversationError,
    FlowLoadError,
    FlowValidationError,
    GraphTypeMismatch,
    MissingSubroutineSource,
    ModuleResolutionError,
    NoStartFound,
    UnknownVertex,
)
from flowtalk.core.flow import Edge, Flow, FlowLoader, Vertex, VertexEdges, VertexKind

__all__ = [
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
