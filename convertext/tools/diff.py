"""Unified diff between an original and a converted text."""

import difflib

DIFF_LABEL = "text"


def generate_diff(original: str, modified: str) -> str:
    """
    Build a unified diff of two texts.

    Returns an empty string when the texts are identical.
    """
    if original == modified:
        return ""
    lines = difflib.unified_diff(
        original.split("\n"),
        modified.split("\n"),
        fromfile=DIFF_LABEL,
        tofile=DIFF_LABEL,
        lineterm="",
    )
    return "\n".join(lines) + "\n"
