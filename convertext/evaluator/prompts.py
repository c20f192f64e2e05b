"""Prompts for the delegated evaluator.

The reply grammar is parsed by ``parser.parse_reply``; keep the two in sync.
"""

from typing import Iterable, Optional

from ..constants import PROMPT_SAMPLE_CHARS
from ..tools.models import ToolSignature


EVALUATOR_SYSTEM_PROMPT = """\
You pick the single text tool that best performs a user's conversion task.

Reply in exactly this format and nothing else:
TOOL: <tool name>
<argument name>::<argument value>
REASONING: <one or two sentences>

Rules:
- Use a tool name from the list exactly as written.
- Write one argument line per parameter after "text", in the order the parameters are listed.
- Do not write an argument line for "text"; the input text is passed automatically.
- If no tool fits, answer TOOL: custom with no argument lines.
"""


def render_tool_catalog(signatures: Iterable[ToolSignature]) -> str:
    """One ``- name(params): description`` line per tool."""
    return "\n".join(
        f"- {sig.name}({', '.join(sig.params)}): {sig.description}"
        for sig in signatures
    )


def build_evaluation_prompt(
    signatures: Iterable[ToolSignature],
    text: str,
    task_description: str,
    example_output: Optional[str] = None,
) -> str:
    """
    Build the user message for a tool decision.

    Only the first PROMPT_SAMPLE_CHARS characters of the text are included.
    """
    sample = (text or "")[:PROMPT_SAMPLE_CHARS]
    parts = [
        "Available tools:",
        render_tool_catalog(signatures),
        "",
        f"Task: {task_description}",
        "",
        "Text sample:",
        sample,
    ]
    if example_output:
        parts += ["", "Example of the desired output:", example_output]
    return "\n".join(parts)
