"""Canned node output used when no LLM credential is configured."""

from stellarmind.engine.prompts import node_line

MOCK_NODES: dict[str, tuple[str, ...]] = {
    "question-1": (
        "什么是基本原理？",
        "有哪些应用场景？",
        "发展历程如何？",
        "面临什么挑战？",
    ),
    "answer-2": ("基于深度学习和神经网络技术",),
    "question-3": ("具体实现机制是什么？",),
    "answer-4": ("通过多层神经网络处理复杂数据",),
}

FALLBACK_KEY = "question-1"


def generate_mock_nodes(level: int, expected_type: str, parent_id: str) -> str:
    """Return newline-delimited node lines for ``{expected_type}-{level}``.

    Unknown keys fall back to the level-1 question set, which keeps its own
    level and type; the explorer normalises those against the schedule.
    """
    key = f"{expected_type}-{level}"
    if key not in MOCK_NODES:
        key = FALLBACK_KEY
    node_type, key_level = key.split("-")
    return "\n".join(
        node_line(content, int(key_level), node_type, parent_id)
        for content in MOCK_NODES[key]
    )
