"""Bounded recursive exploration.

Starting from a root question the explorer expands a fixed four-level
schedule: level-1 sub-questions, a level-2 answer for each, level-3 deeper
questions for each answer and a level-4 root-principle answer for each of
those. Expansion runs depth-first and strictly sequentially; every node is
streamed before its edge, and every edge before that node's children.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

from pydantic import ValidationError

from stellarmind.engine.llm import DEFAULT_MODEL_ID, LLMClient, resolve_model
from stellarmind.engine.mock import generate_mock_nodes
from stellarmind.engine.prompts import DEFAULT_READING_LEVEL, build_prompt, expected_node_type
from stellarmind.models.exploration import (
    AI_SERVICE_FAILURE,
    EXPLORATION_COMPLETE,
    MAX_DEPTH,
    DoneEvent,
    EdgeEvent,
    ErrorEvent,
    ExplorationEdge,
    ExplorationNode,
    GeneratedLine,
    MessageData,
    NodeEvent,
    NodeType,
    StreamEvent,
)
from stellarmind.utils.identifiers import generate_node_id

logger = logging.getLogger(__name__)

# (level, node type of the child) -> question handed to the next level
FOLLOW_UP_QUESTIONS: dict[tuple[int, NodeType], str] = {
    (1, NodeType.question): "请回答：{content}",
    (2, NodeType.answer): '基于这个答案"{content}"，可以进一步探索什么？',
    (3, NodeType.question): "请回答：{content}",
}


@dataclass(frozen=True)
class WorkItem:
    """One pending expansion: ask the model about ``question`` under ``parent_id``."""

    question: str
    parent_id: str
    level: int


class Explorer:
    """Drives one exploration run per call to :meth:`explore`."""

    def __init__(
        self,
        llm: LLMClient | None = None,
        max_depth: int = MAX_DEPTH,
        max_fanout: int | None = None,
    ) -> None:
        """
        Args:
            llm: Client used for completions; None selects mock mode
            max_depth: Deepest level that may be generated (at most 4)
            max_fanout: Optional cap on the children kept per expansion
        """
        self.llm = llm
        self.max_depth = min(max_depth, MAX_DEPTH)
        self.max_fanout = max_fanout

    @property
    def mock_mode(self) -> bool:
        return self.llm is None

    async def explore(
        self,
        question: str,
        model_id: str | None = DEFAULT_MODEL_ID,
        reading_level: str = DEFAULT_READING_LEVEL,
    ) -> AsyncIterator[StreamEvent]:
        """Yield node/edge/error events for the whole tree, then ``done``."""
        _, model_name = resolve_model(model_id)

        root = ExplorationNode(
            id=generate_node_id(NodeType.question.value),
            content=question,
            level=0,
            node_type=NodeType.question,
            parent_id=None,
        )
        yield NodeEvent(data=root)

        # LIFO so that children are expanded in emission order, depth first
        pending: list[WorkItem] = [WorkItem(question, root.id, 1)]
        while pending:
            item = pending.pop()
            if item.level > self.max_depth:
                continue

            try:
                content = await self._generate(item, model_name, reading_level)
            except Exception:
                logger.exception("LLM call failed at level %d (parent %s)", item.level, item.parent_id)
                yield ErrorEvent(data=MessageData(message=AI_SERVICE_FAILURE))
                continue

            children: list[ExplorationNode] = []
            for node in self.parse_nodes(content, item):
                yield NodeEvent(data=node)
                yield EdgeEvent(data=ExplorationEdge(source=item.parent_id, target=node.id))
                children.append(node)

            follow_ups = [self.follow_up(child) for child in children]
            pending.extend(reversed([f for f in follow_ups if f is not None]))

        yield DoneEvent(data=MessageData(message=EXPLORATION_COMPLETE))

    async def _generate(self, item: WorkItem, model_name: str, reading_level: str) -> str:
        expected = expected_node_type(item.level)
        if self.llm is None:
            logger.debug("mock mode: generating %s-%d", expected.value, item.level)
            return generate_mock_nodes(item.level, expected.value, item.parent_id)

        prompt = build_prompt(item.question, item.parent_id, item.level, reading_level)
        return await self.llm.complete(prompt, model_name)

    def parse_nodes(self, content: str, item: WorkItem) -> list[ExplorationNode]:
        """Parse newline-delimited node objects, skipping anything malformed.

        Level, type and parent come from the schedule; the model's echo of
        them is only compared and logged.
        """
        if not content:
            return []

        expected = expected_node_type(item.level)
        nodes: list[ExplorationNode] = []
        for raw in content.splitlines():
            line = raw.strip()
            if not line.startswith("{"):
                continue
            try:
                parsed = GeneratedLine.model_validate_json(line)
            except ValidationError:
                logger.warning("Failed to parse line from LLM, skipping: %s", line)
                continue
            if parsed.type != "node":
                logger.debug("Ignoring non-node line: %s", line)
                continue

            data = parsed.data
            if (data.level is not None and data.level != item.level) or (
                data.node_type is not None and data.node_type != expected
            ):
                logger.debug(
                    "Model echoed level=%s type=%s, expected level=%d type=%s",
                    data.level, data.node_type, item.level, expected.value,
                )

            nodes.append(
                ExplorationNode(
                    id=generate_node_id(expected.value),
                    content=data.content,
                    level=item.level,
                    node_type=expected,
                    parent_id=item.parent_id,
                )
            )
            if self.max_fanout is not None and len(nodes) >= self.max_fanout:
                break
        return nodes

    def follow_up(self, node: ExplorationNode) -> WorkItem | None:
        """The next expansion for a freshly emitted node, if the schedule has one."""
        template = FOLLOW_UP_QUESTIONS.get((node.level, node.node_type))
        if template is None or node.level + 1 > self.max_depth:
            return None
        return WorkItem(template.format(content=node.content), node.id, node.level + 1)
