"""
Backend-specific renderers.

This module contains the binding and documentation backends.
"""

from .typescript import TypeScriptGenerator, create_typescript_generator
from .markdown import DocsGenerator, create_docs_generator

__all__ = [
    "TypeScriptGenerator",
    "create_typescript_generator",
    "DocsGenerator",
    "create_docs_generator",
]
