"""
Naming utilities for safe code generation.

Handles case conversions and keyword conflicts for identifiers that the
renderers derive from schema names.
"""

import re
from typing import Dict, Iterable, Optional, Set


def upper_first(ident: str) -> str:
    return ident[:1].upper() + ident[1:]


def lower_first(ident: str) -> str:
    return ident[:1].lower() + ident[1:]


def pascal_to_snake(name: str) -> str:
    """Convert PascalCase or camelCase to snake_case (``GetPublicKey`` -> ``get_public_key``)."""
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    s2 = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", s1)
    return s2.replace("-", "_").lower()


class NameSanitizer:
    """Handles name sanitization against reserved words."""

    def __init__(self, reserved_words: Optional[Iterable[str]] = None,
                 builtin_types: Optional[Iterable[str]] = None):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Language reserved words
            builtin_types: Builtin names that might conflict
        """
        self.reserved_words: Set[str] = set(reserved_words or ())
        self.builtin_types: Set[str] = set(builtin_types or ())
        self._name_cache: Dict[str, str] = {}

    def sanitize_name(self, name: str, suffix_on_conflict: str = "_") -> str:
        """
        Sanitize a name for safe use in the target language.

        Args:
            name: Original name to sanitize
            suffix_on_conflict: Suffix added on keyword conflicts

        Returns:
            Sanitized name safe for use
        """
        cache_key = f"{name}|{suffix_on_conflict}"
        if cache_key in self._name_cache:
            return self._name_cache[cache_key]

        final_name = self._clean_basic(name)
        if self.is_reserved(final_name):
            final_name = f"{final_name}{suffix_on_conflict}"

        self._name_cache[cache_key] = final_name
        return final_name

    def _clean_basic(self, name: str) -> str:
        """Basic name cleanup - remove invalid characters."""
        cleaned = re.sub(r"[^a-zA-Z0-9_$]", "_", name)

        # Ensure doesn't start with number
        if cleaned and cleaned[0].isdigit():
            cleaned = f"_{cleaned}"

        if not cleaned:
            cleaned = "value"

        return cleaned

    def is_reserved(self, name: str) -> bool:
        return name in self.reserved_words or name in self.builtin_types
