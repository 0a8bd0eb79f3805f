"""Pytest configuration and fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from flowtalk.core.flow import Edge, Flow, Vertex, VertexKind


class ScriptedHook:
    """Step hook answering readiness and completion from scripts.

    Each script is a list of answers consumed one per call; the last
    answer repeats. Calls and render contexts are recorded.
    """

    def __init__(self, complete: Any = False, ready: Any = True, error: Exception | None = None):
        self.complete_script = list(complete) if isinstance(complete, list) else [complete]
        self.ready_script = list(ready) if isinstance(ready, list) else [ready]
        self.error = error
        self.complete_calls = 0
        self.ready_calls = 0
        self.rendered: list[dict[str, Any]] = []
        self.props: dict[str, Any] = {}

    @staticmethod
    def _answer(script: list[Any], calls: int) -> Any:
        return script[min(calls, len(script)) - 1]

    async def is_ready(self) -> bool:
        self.ready_calls += 1
        return self._answer(self.ready_script, self.ready_calls)

    async def is_complete(self, throw_on_error: bool = False) -> bool:
        self.complete_calls += 1
        if self.error is not None:
            raise self.error
        return self._answer(self.complete_script, self.complete_calls)

    async def render(self, props: dict[str, Any] | None = None) -> str:
        self.rendered.append(props or {})
        return "rendered"

    def module(self):
        """A step factory returning this hook and recording its props."""

        def factory(**props: Any) -> ScriptedHook:
            self.props = props
            return self

        return factory


def make_vertex(
    id: str,
    hook: ScriptedHook | None = None,
    kind: VertexKind = VertexKind.NORMAL,
    **props: Any,
) -> Vertex:
    """Build a vertex whose module returns ``hook``."""
    if hook is not None:
        props["module"] = hook.module()
    return Vertex(id=id, kind=kind, text=id, props=props)


def make_flow(
    *vertices: Vertex,
    edges: list[tuple[str, str]] | None = None,
    type: str = "flowchart",
    entry_ids: tuple[str, ...] | None = None,
) -> Flow:
    """Build a flow from vertices and (start, end) edge pairs."""
    return Flow(
        type=type,
        vertices={v.id: v for v in vertices},
        edges=tuple(Edge(start=s, end=e, text=f"to {e}") for s, e in edges or []),
        entry_ids=entry_ids,
    )


class Recorder:
    """Observer recording (action, step id) pairs."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str | None]] = []

    def __call__(self, action: str, step: Any) -> None:
        self.calls.append((action, step.id if step is not None else None))


@pytest.fixture
def hook_cls():
    return ScriptedHook


@pytest.fixture
def vertex():
    return make_vertex


@pytest.fixture
def flow_of():
    return make_flow


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def flow_document():
    """A flow document as emitted by the flowchart parser."""
    return {
        "type": "flowchart",
        "title": "Signup",
        "acc": {"title": "Signup flow", "description": "Collects a name"},
        "vertices": {
            "start": {
                "id": "start",
                "type": "stadium",
                "text": "Start",
                "props": {"module": "ask-name"},
                "classes": [],
                "domId": "flowchart-start-0",
                "labelType": "text",
                "styles": [],
            },
            "details": {
                "id": "details",
                "type": "subroutine",
                "text": "Details",
                "props": {"src": "details.json"},
            },
            "done": {"id": "done", "text": "Done", "props": None},
        },
        "edges": [
            {
                "start": "start",
                "end": "details",
                "type": "arrow_point",
                "stroke": "normal",
                "text": "Next",
                "labelType": "text",
                "length": 1,
            },
            {
                "start": "details",
                "end": "done",
                "type": "arrow_open",
                "stroke": "dotted",
                "text": None,
                "labelType": "text",
                "length": 1,
            },
        ],
    }
