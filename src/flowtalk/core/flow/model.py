"""Flow graph model - vertices, edges and derived adjacency.

Pure data produced by a flowchart parser and consumed read-only by the
conversation engine. Nothing here mutates after construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

# Graph types accepted as conversation graphs
CONVERSATION_TYPES = frozenset({"conversation", "flowchart", "flowchart-v2"})


class VertexKind(Enum):
    """Vertex roles in a conversation graph."""

    NORMAL = "normal"
    ENTRY = "entry"  # Candidate start ("stadium" shape)
    SUBROUTINE = "subroutine"  # Nested conversation

    @classmethod
    def from_shape(cls, shape: str | None) -> VertexKind:
        """Map a flowchart vertex shape to its role."""
        if shape in ("stadium", "entry"):
            return cls.ENTRY
        if shape == "subroutine":
            return cls.SUBROUTINE
        return cls.NORMAL


@dataclass(frozen=True)
class Edge:
    """A directed transition between two vertices.

    ``type`` and ``stroke`` classify the edge for rendering, e.g. a
    plain ``arrow_point`` with a ``normal`` stroke is the primary action.
    """

    start: str
    end: str
    type: str = "arrow_point"
    stroke: str = "normal"
    text: str = ""
    label_type: str = "text"
    length: int = 1


@dataclass(frozen=True)
class VertexEdges:
    """Edges touching a vertex, split by direction."""

    incoming: tuple[Edge, ...] = ()
    outgoing: tuple[Edge, ...] = ()


@dataclass(frozen=True)
class Vertex:
    """A vertex of the flow.

    Attributes:
        id: Vertex identifier, unique within the flow.
        kind: Role of the vertex.
        text: Display label.
        props: Behaviour configuration. ``module``/``key`` select the step
            factory; subroutines carry ``flow`` or ``src``.
        link: Click-through link from the diagram, used as a fallback
            subroutine source.
        classes: Diagram style classes.
    """

    id: str
    kind: VertexKind = VertexKind.NORMAL
    text: str = ""
    props: Mapping[str, Any] = field(default_factory=dict)
    link: str | None = None
    classes: tuple[str, ...] = ()

    @property
    def is_subroutine(self) -> bool:
        return self.kind is VertexKind.SUBROUTINE


@dataclass(frozen=True)
class Flow:
    """A parsed conversation graph.

    Vertex declaration order and edge parse order are preserved; both
    drive tie-breaks during navigation.

    Example:
        >>> flow = Flow(
        ...     type="flowchart",
        ...     vertices={"start": Vertex("start", VertexKind.ENTRY), "end": Vertex("end")},
        ...     edges=(Edge("start", "end"),),
        ... )
        >>> flow.edges_for("start").outgoing
        (Edge(start='start', end='end', ...),)
        >>> flow.entry_candidates()
        ('start',)
    """

    type: str
    vertices: Mapping[str, Vertex] = field(default_factory=dict)
    edges: tuple[Edge, ...] = ()
    entry_ids: tuple[str, ...] | None = None
    title: str | None = None
    description: str | None = None
    acc_title: str | None = None
    acc_description: str | None = None

    @property
    def is_conversation(self) -> bool:
        """Whether this graph can drive a conversation."""
        return self.type in CONVERSATION_TYPES

    @cached_property
    def _adjacency(self) -> dict[str, VertexEdges]:
        incoming: dict[str, list[Edge]] = {vid: [] for vid in self.vertices}
        outgoing: dict[str, list[Edge]] = {vid: [] for vid in self.vertices}
        for edge in self.edges:
            outgoing.setdefault(edge.start, []).append(edge)
            incoming.setdefault(edge.end, []).append(edge)
        return {
            vid: VertexEdges(
                incoming=tuple(incoming.get(vid, ())),
                outgoing=tuple(outgoing.get(vid, ())),
            )
            for vid in incoming.keys() | outgoing.keys()
        }

    def edges_for(self, vertex_id: str) -> VertexEdges:
        """Get the edges ending at (incoming) and starting at (outgoing) a vertex."""
        return self._adjacency.get(vertex_id, VertexEdges())

    def entry_candidates(self) -> tuple[str, ...]:
        """Ordered vertex ids eligible to start the conversation.

        A precomputed ``entry_ids`` list is trusted verbatim. Otherwise the
        candidates are the entry-shaped vertices without incoming edges, in
        declaration order; when no vertex is entry-shaped, every vertex
        without incoming edges qualifies.
        """
        if self.entry_ids is not None:
            return self.entry_ids

        roots = [vid for vid in self.vertices if not self.edges_for(vid).incoming]
        entries = [vid for vid in roots if self.vertices[vid].kind is VertexKind.ENTRY]
        if entries:
            return tuple(entries)
        if any(v.kind is VertexKind.ENTRY for v in self.vertices.values()):
            # Entry vertices exist but all are reachable from elsewhere
            return ()
        return tuple(roots)

    def validate(self) -> list[str]:
        """Validate the flow structure.

        Checks for:
        - Edges naming vertices that are not in the flow
        - Precomputed entry ids that are not in the flow
        - Subroutines without a nested flow or source
        - No entry candidates at all

        Returns:
            List of error messages (empty if valid).
        """
        errors: list[str] = []

        if not self.is_conversation:
            errors.append(f"Flow type {self.type!r} is not a conversation graph")

        for edge in self.edges:
            for end in (edge.start, edge.end):
                if end not in self.vertices:
                    errors.append(f"Edge {edge.start} -> {edge.end} references unknown vertex '{end}'")

        for entry_id in self.entry_ids or ():
            if entry_id not in self.vertices:
                errors.append(f"Entry '{entry_id}' is not a vertex")

        for vertex in self.vertices.values():
            if vertex.is_subroutine and not (
                vertex.props.get("flow") or vertex.props.get("src") or vertex.link
            ):
                errors.append(f"Subroutine '{vertex.id}' has no flow or src")

        if not self.entry_candidates():
            errors.append("Flow has no entry candidates")

        return errors

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Flow:
        """Build a flow from a parsed JSON document.

        Raises:
            FlowValidationError: If the document does not match the schema.
        """
        from flowtalk.core.flow.schema import FlowDocument

        return FlowDocument.parse(data).to_flow()

    def __repr__(self) -> str:
        return f"Flow(type={self.type!r}, vertices={list(self.vertices)}, edges={len(self.edges)})"
