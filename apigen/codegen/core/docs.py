"""
Normalization of summary/description text attached to schema entities.
"""

import re
from typing import Optional, Tuple

_BLANK_LINE = re.compile(r"\n[ \t]*\n")


def normalize_doc(text: Optional[str]) -> Optional[str]:
    """Strip the uniform minimum indentation and outer blank lines."""
    if text is None:
        return None
    lines = text.expandtabs(4).split("\n")
    non_empty = [line for line in lines if line.strip()]
    if not non_empty:
        return None
    min_indent = min(len(line) - len(line.lstrip()) for line in non_empty)
    normalized = "\n".join(line[min_indent:].rstrip() for line in lines)
    return normalized.strip("\n")


def first_paragraph(text: str) -> Tuple[str, Optional[str]]:
    """Split text at the first blank line into (head, rest)."""
    parts = _BLANK_LINE.split(text, maxsplit=1)
    head = parts[0].strip()
    rest = parts[1].strip("\n") if len(parts) > 1 else None
    return head, rest or None


def split_doc(
    summary: Optional[str], description: Optional[str]
) -> Tuple[Optional[str], Optional[str]]:
    """
    Derive the (summary, description) pair of an entity.

    Without a summary, the first paragraph of the description becomes the
    summary and the text after the first blank line the description. When
    both are given, a leading paragraph that repeats the summary is dropped
    from the description.
    """
    summary = normalize_doc(summary)
    description = normalize_doc(description)
    if description is None:
        return summary, None

    head, rest = first_paragraph(description)
    if summary is None:
        return head, rest
    if " ".join(head.split()) == " ".join(summary.split()):
        return summary, rest
    return summary, description
