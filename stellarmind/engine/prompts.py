"""Prompt construction for the explorer.

The template and the per-level rule sets are fixed: the explorer's recursion
schedule (L1 questions -> L2 answers -> L3 questions -> L4 answers) assumes
exactly these four shapes.
"""

import json
from dataclasses import dataclass

from stellarmind.models.exploration import NodeType

DEFAULT_READING_LEVEL = "大学🎓"

STELLARMIND_PROMPT_TEMPLATE = """
你是StellarMind AI，一个基于第一性原理思维的AI知识探索专家。你的任务是层层分解问题，追根溯源，直到找到问题的根本原理。

**核心原则**:
- 第一性原理思维：将复杂问题分解为基本构成要素
- 逐层深入：从现象 → 机制 → 原理 → 本质
- 阅读层级适配：根据{{readingLevel}}调整回答复杂度
- 公式支持：涉及数学/物理概念时使用LaTeX格式

**当前任务**:
- 层级: {{level}}
- 阅读层级: {{readingLevel}}
- 父节点内容: "{{question}}"
- 父节点ID: "{{parentId}}"

**阅读层级说明**:
- 幼儿园🧸: 用最简单的比喻和日常例子解释，避免专业术语
- 小学📚: 用基础概念和简单例子，可以有少量专业词汇
- 中学🎓: 包含基础公式和科学概念，逻辑清晰
- 高中📖: 涉及较复杂的公式和理论，需要一定知识基础
- 大学🎓: 使用专业术语和复杂公式，深入理论分析
- 博士👨‍🎓: 最高学术水平，前沿研究和高级数学表达

**生成规则**:
{{levelInstructions}}

**LaTeX公式格式**: 使用 $...$ 包围行内公式，$$...$$ 包围独立公式

**输出格式**: 只输出JSON，每行一个节点，格式如下：
{"type":"node","data":{"content":"节点内容","level":{{level}},"nodeType":"{{expectedType}}","parentId":"{{parentId}}"}}

**示例输出**:
{{examples}}

请严格按照格式输出，不要添加任何解释文字：
"""


@dataclass(frozen=True)
class LevelRules:
    """What the model is asked to produce at one level."""

    expected_type: NodeType
    instructions: str
    examples: tuple[str, ...]  # example contents, rendered as node lines


SUB_QUESTION_RULES = LevelRules(
    expected_type=NodeType.question,
    instructions="""
按照第一性原理思维，将主题分解为3-4个核心子问题：
1. 定义与本质：这个概念的基本定义是什么？
2. 原理与机制：底层工作原理是什么？
3. 应用与影响：实际应用场景和影响是什么？
4. 局限与发展：面临的挑战和发展方向是什么？

每个问题要能够引导向更深层的探索，避免表面化的描述。
""",
    examples=("人工智能的本质定义是什么？", "AI系统的核心工作原理是什么？"),
)

ANALYTICAL_ANSWER_RULES = LevelRules(
    expected_type=NodeType.answer,
    instructions="""
基于上级问题，提供深入的分析性答案：
- 不只是给出"是什么"，要解释"为什么"
- 根据阅读层级调整复杂度，包含适当的专业术语
- 如果涉及数学/物理概念，使用LaTeX公式
- 每个答案要为下一层的深入探索埋下伏笔
- 答案长度控制在50-100字，确保信息密度
""",
    examples=(
        "AI本质是通过算法模拟人类认知过程，核心在于模式识别和决策优化，"
        "数学基础是概率论和线性代数，如神经网络的激活函数 $f(x) = \\frac{1}{1+e^{-x}}$",
    ),
)

DEEPER_QUESTION_RULES = LevelRules(
    expected_type=NodeType.question,
    instructions="""
基于上级答案，生成1-2个更深层的探索问题：
- 追问"为什么会这样"或"如何实现的"
- 探索答案中提到的关键概念或机制
- 向更基础的原理层面深入
- 确保问题具有探索价值，能引导到根本原理
""",
    examples=("为什么Sigmoid函数能够实现非线性映射？",),
)

ROOT_PRINCIPLE_RULES = LevelRules(
    expected_type=NodeType.answer,
    instructions="""
提供最深层的原理性解释：
- 回到数学、物理或逻辑的基本原理
- 解释现象背后的根本机制
- 使用公式和理论模型（如果适用）
- 连接到更广泛的理论框架
- 体现第一性原理思维的终极目标
""",
    examples=(
        "Sigmoid函数的S形曲线源于指数函数的性质，当 $x \\rightarrow -\\infty$ 时 "
        "$e^{-x} \\rightarrow \\infty$，使得 $\\sigma(x) \\rightarrow 0$；当 "
        "$x \\rightarrow +\\infty$ 时 $e^{-x} \\rightarrow 0$，使得 "
        "$\\sigma(x) \\rightarrow 1$，这种单调性和有界性正是神经网络需要的非线性激活特性",
    ),
)


def rules_for_level(level: int) -> LevelRules:
    """Pick the rule set for a level; anything past 3 gets the root-principle rules."""
    if level <= 1:
        return SUB_QUESTION_RULES
    if level == 2:
        return ANALYTICAL_ANSWER_RULES
    if level == 3:
        return DEEPER_QUESTION_RULES
    return ROOT_PRINCIPLE_RULES


def expected_node_type(level: int) -> NodeType:
    """Node type at a level: 0 and 1 questions, 2 answer, 3 question, 4 answer."""
    if level == 0:
        return NodeType.question
    return rules_for_level(level).expected_type


def node_line(content: str, level: int, node_type: NodeType | str, parent_id: str) -> str:
    """Render one node line in the format the model is asked to produce."""
    node_type = NodeType(node_type).value
    return json.dumps(
        {
            "type": "node",
            "data": {
                "content": content,
                "level": level,
                "nodeType": node_type,
                "parentId": parent_id,
            },
        },
        ensure_ascii=False,
    )


def _substitute_variables(template: str, variables: dict[str, str]) -> str:
    """Substitute every {{variable}} placeholder in the template.

    Supports both {{variable}} and {{ variable }} syntax.
    """
    result = template
    for key, value in variables.items():
        result = result.replace(f"{{{{{key}}}}}", value)
        result = result.replace(f"{{{{ {key} }}}}", value)
    return result


def build_prompt(
    question: str,
    parent_id: str,
    level: int,
    reading_level: str = DEFAULT_READING_LEVEL,
) -> str:
    """Fill the exploration template for one expansion step."""
    rules = rules_for_level(level)
    examples = "\n".join(
        node_line(example, level, rules.expected_type, parent_id)
        for example in rules.examples
    )
    return _substitute_variables(
        STELLARMIND_PROMPT_TEMPLATE,
        {
            "levelInstructions": rules.instructions,
            "examples": examples,
            "level": str(level),
            "expectedType": rules.expected_type.value,
            "readingLevel": reading_level or DEFAULT_READING_LEVEL,
            # user-supplied text last so placeholders inside it stay literal
            "parentId": parent_id,
            "question": question,
        },
    )
