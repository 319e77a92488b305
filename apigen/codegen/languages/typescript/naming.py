"""
TypeScript-specific naming utilities and sanitization.

Handles TypeScript reserved words and global type names.
"""

from ...core.naming import NameSanitizer


# TypeScript / ECMAScript reserved words
TS_RESERVED_WORDS = {
    "break",
    "case",
    "catch",
    "class",
    "const",
    "continue",
    "debugger",
    "default",
    "delete",
    "do",
    "else",
    "enum",
    "export",
    "extends",
    "false",
    "finally",
    "for",
    "function",
    "if",
    "import",
    "in",
    "instanceof",
    "new",
    "null",
    "return",
    "super",
    "switch",
    "this",
    "throw",
    "true",
    "try",
    "typeof",
    "var",
    "void",
    "while",
    "with",
    # Strict mode
    "implements",
    "interface",
    "let",
    "package",
    "private",
    "protected",
    "public",
    "static",
    "yield",
    "await",
}

# Global names a generated declaration would shadow
TS_BUILTIN_TYPES = {
    "any",
    "bigint",
    "boolean",
    "never",
    "number",
    "object",
    "string",
    "symbol",
    "undefined",
    "unknown",
    "Array",
    "Error",
    "Function",
    "Map",
    "Object",
    "Promise",
    "Set",
}


def create_typescript_sanitizer() -> NameSanitizer:
    """Create a name sanitizer configured for TypeScript identifiers."""
    return NameSanitizer(TS_RESERVED_WORDS)


def is_shadowing_builtin(name: str) -> bool:
    return name in TS_BUILTIN_TYPES
