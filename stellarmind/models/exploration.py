"""Exploration wire models.

These are the shapes exchanged between the explorer engine and its clients
over the SSE stream. Python attributes are snake_case; the JSON on the wire
uses the camelCase aliases (``nodeType``, ``parentId``).
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

MAX_DEPTH = 4

EXPLORATION_COMPLETE = "Exploration complete."
AI_SERVICE_FAILURE = "Failed to call AI service."


class NodeType(str, Enum):
    """Kind of content a node carries."""

    question = "question"
    answer = "answer"


class ExplorationNode(BaseModel):
    """A node emitted by the explorer. Immutable once created."""

    model_config = {"frozen": True, "populate_by_name": True}

    id: str
    content: str
    level: int = Field(ge=0, le=MAX_DEPTH)
    node_type: NodeType = Field(alias="nodeType")
    parent_id: str | None = Field(default=None, alias="parentId")


class ExplorationEdge(BaseModel):
    """parent -> child link, emitted once per non-root node."""

    model_config = {"frozen": True}

    source: str
    target: str


class MessageData(BaseModel):
    message: str


class NodeEvent(BaseModel):
    type: Literal["node"] = "node"
    data: ExplorationNode


class EdgeEvent(BaseModel):
    type: Literal["edge"] = "edge"
    data: ExplorationEdge


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    data: MessageData


class DoneEvent(BaseModel):
    type: Literal["done"] = "done"
    data: MessageData


StreamEvent = Annotated[
    Union[NodeEvent, EdgeEvent, ErrorEvent, DoneEvent],
    Field(discriminator="type"),
]

stream_event_adapter: TypeAdapter[StreamEvent] = TypeAdapter(StreamEvent)


class GeneratedNodeData(BaseModel):
    """The ``data`` part of a line produced by the language model.

    Only ``content`` is trusted; level, type and parent are echoed back by the
    model and may be wrong.
    """

    model_config = {"populate_by_name": True}

    content: str = Field(min_length=1)
    level: int | None = None
    node_type: NodeType | None = Field(default=None, alias="nodeType")
    parent_id: str | None = Field(default=None, alias="parentId")


class GeneratedLine(BaseModel):
    """One newline-delimited JSON object from the model output."""

    type: str
    data: GeneratedNodeData


class ExploreRequest(BaseModel):
    """Request body for ``POST /explore``."""

    model_config = {"populate_by_name": True, "protected_namespaces": ()}

    question: str | None = None
    model_id: str | None = Field(default=None, alias="modelId")
    reading_level: str | None = Field(default=None, alias="readingLevel")
