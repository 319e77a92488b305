"""
Generator registry for the supported backends.

Backends form a closed set; a tag is mapped to a ``Backend`` first and an
unknown tag is a usage error.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union

from ..logging_config import get_logger
from .core.config import GeneratorConfig, load_config
from .core.generator import Renderer
from .core.resolver import ResolvedSchema, resolve

logger = get_logger(__name__)


class RegistryError(Exception):
    """Exception raised for registry-related errors."""

    pass


class UsageError(RegistryError):
    """An unsupported backend was requested."""

    pass


class Backend(Enum):
    """Supported generation backends."""

    TS = "ts"
    DOCS = "docs"

    @classmethod
    def from_tag(cls, tag: Union[str, "Backend"]) -> "Backend":
        """
        Map a backend name or alias to a ``Backend``.

        Raises:
            UsageError: If the tag names no supported backend
        """
        if isinstance(tag, Backend):
            return tag
        key = str(tag).strip().lower()
        key = BACKEND_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            supported = ", ".join(b.value for b in cls)
            raise UsageError(f"Unsupported backend: {tag}. Available: {supported}")


BACKEND_ALIASES = {
    "typescript": "ts",
    "md": "docs",
    "markdown": "docs",
}


class GeneratorRegistry:
    """Registry mapping every backend to its renderer class."""

    def __init__(self):
        """Initialize empty registry."""
        self._generators: Dict[Backend, Type[Renderer]] = {}

    def register(self, backend: Backend, generator_class: Type[Renderer], replace: bool = False):
        """
        Register a renderer for a backend.

        Args:
            backend: Backend to register
            generator_class: Renderer class for it
            replace: If True, replace existing registration. If False, skip if exists.

        Raises:
            RegistryError: If the renderer class is invalid
        """
        if not issubclass(generator_class, Renderer):
            raise RegistryError("Generator class must inherit from Renderer")

        if backend in self._generators and not replace:
            return

        self._generators[backend] = generator_class

    def get_generator_class(self, tag: Union[str, Backend]) -> Type[Renderer]:
        """
        Get renderer class for a backend tag.

        Raises:
            UsageError: If the tag is unknown
            RegistryError: If the backend has no registered renderer
        """
        backend = Backend.from_tag(tag)
        try:
            return self._generators[backend]
        except KeyError:
            raise RegistryError(f"No generator registered for backend: {backend.value}")

    def create_generator(
        self,
        tag: Union[str, Backend],
        schema: ResolvedSchema,
        config: Optional[Union[GeneratorConfig, Dict[str, Any], str, Path]] = None,
    ) -> Renderer:
        """
        Create a renderer instance for a backend.

        Args:
            tag: Backend name or alias
            schema: Resolved schema to render
            config: Configuration as GeneratorConfig, dict, or file path

        Returns:
            Configured renderer instance
        """
        backend = Backend.from_tag(tag)
        generator_class = self.get_generator_class(backend)

        if isinstance(config, GeneratorConfig):
            final_config = config
        elif isinstance(config, (str, Path)):
            final_config = load_config(backend.value, config_file=config)
        elif isinstance(config, dict):
            final_config = load_config(backend.value, custom_config=config)
        elif config is None:
            final_config = load_config(backend.value)
        else:
            raise RegistryError(f"Invalid config type: {type(config)}")

        logger.debug("Creating %s for backend %s", generator_class.__name__, backend.value)
        return generator_class(schema, final_config)

    def list_backends(self) -> List[str]:
        """Get list of registered backend names."""
        return [b.value for b in Backend if b in self._generators]

    def get_aliases_for_backend(self, tag: Union[str, Backend]) -> List[str]:
        backend = Backend.from_tag(tag)
        return sorted(alias for alias, target in BACKEND_ALIASES.items() if target == backend.value)

    def get_backend_info(self, tag: Union[str, Backend]) -> Dict[str, Any]:
        """
        Get information about a registered backend.

        Returns:
            Dict with backend information
        """
        backend = Backend.from_tag(tag)
        generator_class = self.get_generator_class(backend)

        # Create temporary instance over an empty schema to get info
        temp_generator = generator_class(
            resolve({"version": "0", "modules": []}), load_config(backend.value)
        )

        return {
            "name": backend.value,
            "language": temp_generator.language_name,
            "class": generator_class.__name__,
            "file_extension": temp_generator.file_extension,
            "aliases": self.get_aliases_for_backend(backend),
            "module": generator_class.__module__,
        }


# Global registry instance - created once
_global_registry: Optional[GeneratorRegistry] = None


def get_registry() -> GeneratorRegistry:
    """Get the global generator registry, initializing if needed."""
    global _global_registry
    if _global_registry is None:
        _global_registry = GeneratorRegistry()
        _auto_register_generators(_global_registry)
    return _global_registry


def _auto_register_generators(registry: GeneratorRegistry):
    """Register the renderer of every backend."""
    from .languages.markdown import DocsGenerator
    from .languages.typescript import TypeScriptGenerator

    registry.register(Backend.TS, TypeScriptGenerator)
    registry.register(Backend.DOCS, DocsGenerator)


# Public API functions using the global registry


def get_generator(
    tag: Union[str, Backend],
    schema: ResolvedSchema,
    config: Optional[Union[GeneratorConfig, Dict[str, Any], str, Path]] = None,
) -> Renderer:
    """
    Get renderer instance from global registry.

    Args:
        tag: Backend name or alias
        schema: Resolved schema
        config: Configuration

    Returns:
        Renderer instance
    """
    return get_registry().create_generator(tag, schema, config)


def list_supported_backends() -> List[str]:
    """List all supported backends from global registry."""
    return get_registry().list_backends()


def is_backend_supported(tag: str) -> bool:
    """Check if a backend tag is supported."""
    try:
        Backend.from_tag(tag)
    except UsageError:
        return False
    return True


def get_backend_info(tag: Union[str, Backend]) -> Dict[str, Any]:
    """Get information about a supported backend."""
    return get_registry().get_backend_info(tag)


def list_all_backend_info() -> Dict[str, Dict[str, Any]]:
    """Get information about all supported backends."""
    return {name: get_backend_info(name) for name in list_supported_backends()}
