"""
Core code generation components.

Provides the schema model, resolution, and base classes used by all backends.
"""

from .generator import (
    BindingRenderer,
    GenerationResult,
    GeneratorError,
    Renderer,
    generate_code,
)
from .schema import (
    ApiType,
    Const,
    ConstKind,
    Field,
    Function,
    Module,
    Schema,
    SchemaError,
    TypeKind,
    TypeVisitor,
    parse_schema,
)
from .resolver import FunctionInfo, ResolvedSchema, resolve, validate_schema
from .naming import NameSanitizer
from .config import GeneratorConfig, ConfigManager, ConfigError, load_config
from .templates import TemplateEngine, TemplateError, create_template_engine

__all__ = [
    # Base renderer interface
    "Renderer",
    "BindingRenderer",
    "GeneratorError",
    "GenerationResult",
    "generate_code",
    # Schema model
    "ApiType",
    "Const",
    "ConstKind",
    "Field",
    "Function",
    "Module",
    "Schema",
    "SchemaError",
    "TypeKind",
    "TypeVisitor",
    "parse_schema",
    # Resolution
    "FunctionInfo",
    "ResolvedSchema",
    "resolve",
    "validate_schema",
    # Naming utilities - language-agnostic
    "NameSanitizer",
    # Configuration system
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Template system - language-agnostic
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
]
