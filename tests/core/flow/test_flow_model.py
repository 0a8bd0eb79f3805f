"""Tests for flowtalk.core.flow.model."""

import pytest

from flowtalk.core.flow import Edge, Flow, Vertex, VertexEdges, VertexKind


def _flow(**kwargs):
    defaults = {
        "type": "flowchart",
        "vertices": {
            "a": Vertex("a", VertexKind.ENTRY),
            "b": Vertex("b"),
            "c": Vertex("c"),
        },
        "edges": (Edge("a", "b"), Edge("a", "c", stroke="dotted"), Edge("b", "c")),
    }
    defaults.update(kwargs)
    return Flow(**defaults)


class TestVertexKind:
    """Tests for shape to role mapping."""

    @pytest.mark.parametrize(
        "shape,kind",
        [
            ("stadium", VertexKind.ENTRY),
            ("entry", VertexKind.ENTRY),
            ("subroutine", VertexKind.SUBROUTINE),
            ("round", VertexKind.NORMAL),
            (None, VertexKind.NORMAL),
        ],
    )
    def test_from_shape(self, shape, kind):
        assert VertexKind.from_shape(shape) is kind


class TestEdgesFor:
    """Tests for derived adjacency."""

    def test_split_by_direction(self):
        flow = _flow()

        edges = flow.edges_for("a")
        assert edges.incoming == ()
        assert [e.end for e in edges.outgoing] == ["b", "c"]

        edges = flow.edges_for("c")
        assert [e.start for e in edges.incoming] == ["a", "b"]
        assert edges.outgoing == ()

    def test_outgoing_keeps_parse_order(self):
        flow = _flow(edges=(Edge("a", "c"), Edge("a", "b")))
        assert [e.end for e in flow.edges_for("a").outgoing] == ["c", "b"]

    def test_unknown_vertex_has_no_edges(self):
        assert _flow().edges_for("zzz") == VertexEdges()


class TestEntryCandidates:
    """Tests for start selection candidates."""

    def test_precomputed_entries_are_trusted(self):
        flow = _flow(entry_ids=("c", "b"))
        assert flow.entry_candidates() == ("c", "b")

    def test_derived_entries_need_shape_and_no_incoming(self):
        flow = _flow(
            vertices={
                "a": Vertex("a"),
                "b": Vertex("b", VertexKind.ENTRY),
                "c": Vertex("c", VertexKind.ENTRY),
            },
            edges=(Edge("a", "b"),),
        )
        assert flow.entry_candidates() == ("c",)

    def test_without_entry_shapes_roots_qualify(self):
        flow = _flow(
            vertices={"a": Vertex("a"), "b": Vertex("b"), "c": Vertex("c")},
            edges=(Edge("a", "b"),),
        )
        assert flow.entry_candidates() == ("a", "c")

    def test_entry_shapes_all_reachable(self):
        flow = _flow(
            vertices={"a": Vertex("a"), "b": Vertex("b", VertexKind.ENTRY)},
            edges=(Edge("a", "b"),),
        )
        assert flow.entry_candidates() == ()

    def test_empty_flow(self):
        assert Flow(type="flowchart").entry_candidates() == ()


class TestFlow:
    """Tests for Flow helpers."""

    @pytest.mark.parametrize("graph_type", ["conversation", "flowchart", "flowchart-v2"])
    def test_is_conversation(self, graph_type):
        assert Flow(type=graph_type).is_conversation is True

    def test_other_types_are_not_conversations(self):
        assert Flow(type="barchart").is_conversation is False

    def test_validate_valid_flow(self):
        assert _flow().validate() == []

    def test_validate_dangling_edge(self):
        flow = _flow(edges=(Edge("a", "ghost"),))
        errors = flow.validate()
        assert len(errors) == 1
        assert "ghost" in errors[0]

    def test_validate_subroutine_without_source(self):
        flow = _flow(
            vertices={"a": Vertex("a", VertexKind.ENTRY), "sub": Vertex("sub", VertexKind.SUBROUTINE)},
            edges=(Edge("a", "sub"),),
        )
        assert flow.validate() == ["Subroutine 'sub' has no flow or src"]

    def test_validate_subroutine_link_counts_as_source(self):
        flow = _flow(
            vertices={
                "a": Vertex("a", VertexKind.ENTRY),
                "sub": Vertex("sub", VertexKind.SUBROUTINE, link="sub.mmd"),
            },
            edges=(Edge("a", "sub"),),
        )
        assert flow.validate() == []

    def test_validate_reports_type_and_missing_entries(self):
        errors = Flow(type="pie").validate()
        assert any("not a conversation graph" in e for e in errors)
        assert "Flow has no entry candidates" in errors

    def test_validate_unknown_entry_id(self):
        errors = _flow(entry_ids=("nope",)).validate()
        assert "Entry 'nope' is not a vertex" in errors
