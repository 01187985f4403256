"""Exploration engine: prompts, LLM clients and the bounded explorer."""

from stellarmind.engine.explorer import Explorer, WorkItem
from stellarmind.engine.llm import (
    AnthropicChatClient,
    LLMCallError,
    LLMClient,
    OpenAIChatClient,
    create_llm_client,
    resolve_model,
)
from stellarmind.engine.mock import generate_mock_nodes
from stellarmind.engine.prompts import build_prompt, expected_node_type

__all__ = [
    "Explorer",
    "WorkItem",
    "LLMClient",
    "LLMCallError",
    "OpenAIChatClient",
    "AnthropicChatClient",
    "create_llm_client",
    "resolve_model",
    "generate_mock_nodes",
    "build_prompt",
    "expected_node_type",
]
