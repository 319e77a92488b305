"""
TypeScript binding generator module.

Generates typed client bindings (types, variant factories and one
client class per module) from a resolved API schema.
"""

from .generator import TypeScriptGenerator, create_typescript_generator
from .naming import create_typescript_sanitizer
from .types import TypeScriptTypeMapper

__all__ = [
    "TypeScriptGenerator",
    "TypeScriptTypeMapper",
    "create_typescript_generator",
    "create_typescript_sanitizer",
]
