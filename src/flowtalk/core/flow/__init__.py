"""Flow graph model.

Classes:
    Flow: A parsed conversation graph.
    Vertex: A vertex with its behaviour props.
    Edge: A directed transition.
    VertexEdges: Incoming/outgoing edges of a vertex.
    VertexKind: Vertex role (normal, entry, subroutine).
    FlowDocument: Pydantic schema for flow JSON.
    FlowLoader: Load flow JSON from disk or HTTP.

Example:
    >>> from flowtalk.core.flow import Flow
    >>>
    >>> flow = Flow.from_dict({
    ...     "type": "flowchart",
    ...     "vertices": {"start": {"type": "stadium"}, "end": {}},
    ...     "edges": [{"start": "start", "end": "end"}],
    ... })
    >>> flow.entry_candidates()
    ('start',)
"""

from flowtalk.core.flow.loader import FlowLoader, Loader
from flowtalk.core.flow.model import Edge, Flow, Vertex, VertexEdges, VertexKind
from flowtalk.core.flow.schema import FlowDocument

__all__ = [
    "Edge",
    "Flow",
    "FlowDocument",
    "FlowLoader",
    "Loader",
    "Vertex",
    "VertexEdges",
    "VertexKind",
]
