"""
Markdown documentation generator module.

Generates cross-linked module pages whose code samples come from a
wrapped binding renderer.
"""

from .generator import DocsGenerator, create_docs_generator
from .labels import MarkdownTypeLabeler

__all__ = [
    "DocsGenerator",
    "MarkdownTypeLabeler",
    "create_docs_generator",
]
