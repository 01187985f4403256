"""Session and exploration configuration models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from stellarmind.models.graph import GraphEdge, GraphNode
from stellarmind.utils.identifiers import utc_now


class AIModelConfig(BaseModel):
    provider: Literal["openai", "claude", "custom"] = "openai"
    model: str = "gpt-4"
    api_key: str | None = None
    base_url: str | None = None
    temperature: float = Field(default=0.7, ge=0, le=1)  # creativity
    max_tokens: int = 2000


class ExploreConfig(BaseModel):
    """User-tunable exploration settings, persisted across sessions."""

    depth: int = Field(default=3, ge=1, le=5)
    breadth: int = Field(default=3, ge=1, le=5)
    model: AIModelConfig = Field(default_factory=AIModelConfig)
    auto_generate: bool = True
    show_thinking: bool = False


class SessionMetadata(BaseModel):
    view_count: int = 0
    like_count: int = 0
    bookmarked: bool = False


class SessionData(BaseModel):
    """A saved exploration. Saving supersedes the previous copy (last write wins)."""

    id: str
    title: str
    description: str | None = None
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
    config: ExploreConfig = Field(default_factory=ExploreConfig)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    user_id: str | None = None
    is_public: bool = False
    tags: list[str] = Field(default_factory=list)
    metadata: SessionMetadata = Field(default_factory=SessionMetadata)


class SessionStats(BaseModel):
    total_sessions: int
    total_nodes: int
    total_questions: int
    bookmarked_sessions: int
    available_tags: list[str]
