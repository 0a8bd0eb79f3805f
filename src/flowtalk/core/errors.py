"""Conversation error types.

Custom exceptions for flow validation, step resolution and navigation.
"""

from __future__ import annotations

from typing import Any


class ConversationError(Exception):
    """Base error for conversation operations."""


class GraphTypeMismatch(ConversationError):
    """The supplied graph is not a conversation (flowchart) graph.

    Raised at construction time; the conversation cannot be used.
    """

    def __init__(self, graph_type: str | None) -> None:
        super().__init__(f"Only conversation flows are supported, got {graph_type!r}.")
        self.graph_type = graph_type


class NoStartFound(ConversationError):
    """No entry vertex is ready to start the conversation."""

    def __init__(self) -> None:
        super().__init__("Could not find a starting point.")


class UnknownVertex(ConversationError, KeyError):
    """The requested vertex id is not part of the flow.

    Navigation and ``Conversation.get`` treat this as "no such step"
    and resolve to ``None`` instead of raising.
    """

    def __init__(self, vertex_id: str) -> None:
        super().__init__(f"Unknown vertex {vertex_id!r}.")
        self.vertex_id = vertex_id

    def __str__(self) -> str:
        # KeyError quotes its argument otherwise
        return str(self.args[0])


class MissingSubroutineSource(ConversationError):
    """A subroutine vertex has neither a nested flow nor a source locator."""

    def __init__(self, vertex_id: str) -> None:
        super().__init__(f"No source provided for subroutine, {vertex_id}.")
        self.vertex_id = vertex_id


class ModuleResolutionError(ConversationError):
    """A step's behaviour module reference could not be resolved."""

    def __init__(self, reference: str, key: str | None = None, reason: str | None = None) -> None:
        target = f"{reference}[{key}]" if key else reference
        message = f"Cannot resolve module {target!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.reference = reference
        self.key = key


class FlowValidationError(ConversationError, ValueError):
    """A flow document failed schema validation.

    Attributes:
        errors: Individual validation messages.
    """

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Invalid flow document: " + "; ".join(errors))
        self.errors = errors


class FlowLoadError(ConversationError):
    """An external flow source could not be loaded.

    Raised when:
    - The file does not exist or cannot be read
    - The HTTP request fails or returns a non-2xx status
    - The payload is not valid JSON
    """

    def __init__(self, src: str, reason: Any) -> None:
        super().__init__(f"Could not load flow from {src!r}: {reason}")
        self.src = src
