"""
apigen Code Generation Module

Generates client bindings and documentation from an API schema.
"""

from typing import Any, Dict, Optional, Union

from .registry import (
    Backend,
    GeneratorRegistry,
    RegistryError,
    UsageError,
    get_backend_info,
    get_generator,
    list_all_backend_info,
    list_supported_backends,
)
from .core.generator import (
    BindingRenderer,
    GenerationResult,
    GeneratorError,
    Renderer,
    generate_code,
)
from .core.schema import Schema, SchemaError
from .core.resolver import ResolvedSchema, resolve
from .core.config import GeneratorConfig, ConfigError, ConfigManager, load_config
from .core.templates import TemplateError

# Version info
__version__ = "0.1.0"


def generate_from_schema(
    source: Union[str, bytes, Dict[str, Any], Schema, ResolvedSchema],
    backend: Union[str, Backend] = "ts",
    config: Optional[Union[GeneratorConfig, Dict[str, Any], str]] = None,
) -> GenerationResult:
    """
    Generate files from a schema document.

    Args:
        source: Raw JSON text, parsed document, Schema or ResolvedSchema
        backend: Backend name or alias
        config: Generator configuration object, dict or file path

    Returns:
        GenerationResult with generated files

    Raises:
        UsageError: If the backend is not supported
        SchemaError: If the schema cannot be resolved
    """
    selected = Backend.from_tag(backend)
    schema = source if isinstance(source, ResolvedSchema) else resolve(source)
    generator = get_generator(selected, schema, config)
    return generate_code(generator)


# Export main interfaces
__all__ = [
    "Backend",
    "BindingRenderer",
    "ConfigError",
    "ConfigManager",
    "GenerationResult",
    "GeneratorConfig",
    "GeneratorError",
    "GeneratorRegistry",
    "RegistryError",
    "Renderer",
    "ResolvedSchema",
    "Schema",
    "SchemaError",
    "TemplateError",
    "UsageError",
    "generate_code",
    "generate_from_schema",
    "get_backend_info",
    "get_generator",
    "list_all_backend_info",
    "list_supported_backends",
    "load_config",
    "resolve",
]
