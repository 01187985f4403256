"""Client-side graph entities held by the graph store."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from stellarmind.utils.identifiers import utc_now


class Position(BaseModel):
    model_config = {"frozen": True}

    x: float = 0.0
    y: float = 0.0


class GraphNode(BaseModel):
    """Materialised exploration node.

    Exactly one of ``question``/``answer`` carries the node's content, chosen
    by the node type it was created from. Instances are frozen; the store
    replaces them via ``model_copy(update=...)``.
    """

    model_config = {"frozen": True}

    id: str
    question: str = ""
    answer: str = ""
    level: int = 0
    parent_id: str | None = None
    position: Position = Field(default_factory=Position)
    is_collapsed: bool = False
    is_generating: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def content(self) -> str:
        return self.question or self.answer

    @property
    def is_question(self) -> bool:
        return bool(self.question) or not self.answer


class GraphEdge(BaseModel):
    """Rendered edge between two graph nodes."""

    model_config = {"frozen": True}

    id: str
    source: str
    target: str
    type: str = "smoothstep"  # straight, smoothstep, bezier
    animated: bool = False
    style: dict[str, Any] | None = None
