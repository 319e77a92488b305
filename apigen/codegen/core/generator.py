"""
Base renderer interfaces for all generation targets.

Defines the contract that binding and documentation backends implement,
and ``generate_code`` which runs a renderer over a resolved schema.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from ...logging_config import get_logger
from .config import GeneratorConfig
from .resolver import ResolvedSchema, validate_schema
from .schema import Const, Field, Function, Module, ApiType
from .templates import TemplateEngine, create_template_engine

logger = get_logger(__name__)


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class Renderer(ABC):
    """Abstract base class for all renderers."""

    def __init__(self, schema: ResolvedSchema, config: Optional[GeneratorConfig] = None):
        """Initialize renderer over a resolved schema with optional configuration."""
        self.schema = schema
        self.config = config or GeneratorConfig()
        self._template_engine = None

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the name of the target (e.g., 'typescript', 'markdown')."""
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Return the file extension for generated files (e.g., '.ts', '.md')."""
        pass

    @property
    def code_fence(self) -> str:
        """Info string used when this renderer's output is embedded in Markdown."""
        return self.file_extension.lstrip(".")

    def get_template_directory(self) -> Optional[Path]:
        """
        Return a directory whose templates override the built-in ones.

        Returns:
            Path to template directory or None
        """
        template_dir = self.config.custom.get("template_dir")
        return Path(template_dir).expanduser() if template_dir else None

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this renderer."""
        if self._template_engine is None:
            self._template_engine = create_template_engine(self.get_template_directory())
        return self._template_engine

    @abstractmethod
    def render_module(self, module: Module) -> str:
        """
        Render one self-contained unit for a module.

        Args:
            module: Module of the resolved schema (or an app object)

        Returns:
            Generated text for this module only
        """
        pass

    @abstractmethod
    def render_all(self) -> str:
        """Render every module, preceded by the fixed header."""
        pass

    @abstractmethod
    def output_files(self) -> Dict[str, str]:
        """
        Render the logical output files.

        Returns:
            Mapping of file name to generated text
        """
        pass

    def validate_schema(self) -> List[str]:
        """
        Validate the schema for issues that do not abort generation.

        Renderers may override this to add target-specific checks.

        Returns:
            List of warning messages (empty if no issues)
        """
        return validate_schema(self.schema)

    def format_code(self, code: str) -> str:
        """
        Apply target-specific formatting to generated text.

        Args:
            code: Raw generated text

        Returns:
            Formatted text
        """
        # Basic cleanup - remove excessive blank lines
        lines = code.split("\n")
        formatted_lines = []
        blank_count = 0

        for line in lines:
            stripped = line.rstrip()
            if not stripped:
                blank_count += 1
                if blank_count <= 2:  # Allow max 2 consecutive blank lines
                    formatted_lines.append("")
            else:
                blank_count = 0
                formatted_lines.append(stripped)

        return "\n".join(formatted_lines).strip("\n") + "\n"

    # Template helper methods

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with context.

        Args:
            template_name: Template name
            context: Template variables

        Returns:
            Rendered content
        """
        return self.template_engine.render_template(template_name, context)


class BindingRenderer(Renderer):
    """Renderer that emits typed client binding source, one operation per syntactic unit."""

    @abstractmethod
    def render_type(self, t: ApiType, indent: str = "") -> str:
        """Type expression without trailing declaration syntax."""

    @abstractmethod
    def render_type_def(self, field: Field) -> str:
        """Full named declaration of a module-level type."""

    @abstractmethod
    def render_field(self, field: Field, indent: str = "") -> str:
        """Member declaration."""

    @abstractmethod
    def render_variant(self, variant: Field, indent: str = "") -> str:
        """Union member of a tagged union."""

    @abstractmethod
    def render_const(self, const: Const) -> str:
        """Enumeration member."""

    @abstractmethod
    def render_function_signature(self, func: Function) -> str:
        """Declaration-only signature."""

    @abstractmethod
    def render_function_body(self, func: Function) -> str:
        """Full implementation wired to the injected transport."""

    @abstractmethod
    def render_callback_interface(self, app_object: Module) -> str:
        """Declaration of the callback shape of an app object."""

    @abstractmethod
    def render_variant_constructors(self, field: Field) -> str:
        """One factory per variant of a tagged-union type definition."""


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self, files: Dict[str, str], warnings: List[str] = None, metadata: Dict[str, Any] = None
    ):
        """
        Initialize generation result.

        Args:
            files: Generated text keyed by logical file name
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
        """
        self.files = files
        self.warnings = warnings or []
        self.metadata = metadata or {}

    @property
    def file_names(self) -> List[str]:
        return list(self.files)


def generate_code(renderer: Renderer) -> GenerationResult:
    """
    Run a renderer over its schema.

    Errors propagate to the caller; no partial result is returned.

    Args:
        renderer: Configured renderer instance

    Returns:
        GenerationResult with files, warnings, and metadata
    """
    schema = renderer.schema
    warnings = renderer.validate_schema()
    for warning in warnings:
        logger.warning(warning)

    files = {
        name: renderer.format_code(text)
        for name, text in renderer.output_files().items()
    }

    metadata = {
        "language": renderer.language_name,
        "file_extension": renderer.file_extension,
        "version": schema.version,
        "module_count": len(schema.modules),
        "function_count": sum(len(m.functions) for m in schema.modules),
        "type_count": sum(len(m.types) for m in schema.modules),
        "app_object_count": len(schema.app_objects),
    }
    logger.info(
        "Generated %d %s file(s) for schema %s",
        len(files),
        renderer.language_name,
        schema.version,
    )

    return GenerationResult(files, warnings, metadata)
