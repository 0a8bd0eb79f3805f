"""Pydantic models for flowchart JSON documents.

These models validate flow documents handed over by an external flowchart
parser (or loaded from a subroutine ``src``) before they are turned into
:class:`~flowtalk.core.flow.model.Flow` objects. Keys match the parser's
camelCase output; unknown keys pass through.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from flowtalk.core.errors import FlowValidationError
from flowtalk.core.flow.model import Edge, Flow, Vertex, VertexKind


class EdgeDocument(BaseModel):
    """An edge as emitted by the parser."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    start: str
    end: str
    type: str = "arrow_point"
    stroke: str = "normal"
    text: str = ""
    label_type: str = Field(default="text", alias="labelType")
    length: int = 1

    @field_validator("text", mode="before")
    @classmethod
    def validate_text(cls, v: Any) -> Any:
        """Parsers emit null for unlabeled edges."""
        return "" if v is None else v


class AccessibilityDocument(BaseModel):
    """Accessibility metadata of a diagram."""

    model_config = ConfigDict(extra="allow")

    title: str | None = None
    description: str | None = None


class VertexDocument(BaseModel):
    """A vertex as emitted by the parser.

    The diagram shape arrives in ``type`` (``stadium``, ``subroutine``...);
    an explicit ``kind`` takes precedence.
    """

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    type: str | None = None
    kind: VertexKind | None = None
    text: str | None = None
    props: dict[str, Any] = Field(default_factory=dict)
    link: str | None = None
    classes: list[str] = Field(default_factory=list)

    @field_validator("props", mode="before")
    @classmethod
    def validate_props(cls, v: Any) -> Any:
        return {} if v is None else v

    def to_vertex(self, vertex_id: str) -> Vertex:
        return Vertex(
            id=self.id or vertex_id,
            kind=self.kind or VertexKind.from_shape(self.type),
            text=self.text if self.text is not None else (self.id or vertex_id),
            props=self.props,
            link=self.link,
            classes=tuple(self.classes),
        )


class FlowDocument(BaseModel):
    """A complete flow document."""

    model_config = ConfigDict(extra="allow")

    type: str
    vertices: dict[str, VertexDocument] = Field(default_factory=dict)
    edges: list[EdgeDocument] = Field(default_factory=list)
    entry_ids: list[str] | None = Field(
        default=None, validation_alias=AliasChoices("entryIds", "entry_ids", "starts")
    )
    title: str | None = None
    description: str | None = None
    acc: AccessibilityDocument | None = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("flow type cannot be empty")
        return v

    @classmethod
    def parse(cls, data: Mapping[str, Any]) -> FlowDocument:
        """Validate a raw document.

        Raises:
            FlowValidationError: With one message per pydantic error.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            ]
            raise FlowValidationError(errors) from e

    def to_flow(self) -> Flow:
        return Flow(
            type=self.type,
            vertices={vid: doc.to_vertex(vid) for vid, doc in self.vertices.items()},
            edges=tuple(
                Edge(
                    start=e.start,
                    end=e.end,
                    type=e.type,
                    stroke=e.stroke,
                    text=e.text,
                    label_type=e.label_type,
                    length=e.length,
                )
                for e in self.edges
            ),
            entry_ids=tuple(self.entry_ids) if self.entry_ids is not None else None,
            title=self.title,
            description=self.description,
            acc_title=self.acc.title if self.acc else None,
            acc_description=self.acc.description if self.acc else None,
        )
