"""
Template engine wrapper for code generation.

Provides a simple interface for Jinja2 template rendering
with common utilities for code generation. File-level units are
rendered from the built-in templates below; a template directory can
override any of them by name.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import (
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError as JinjaTemplateError,
    select_autoescape,
)

from ...logging_config import get_logger

logger = get_logger(__name__)


class TemplateError(Exception):
    """Exception raised for template-related errors."""

    pass


class TemplateEngine:
    """Wrapper for Jinja2 template engine with code generation utilities."""

    def __init__(self, template_dir: Optional[Path] = None,
                 templates: Optional[Dict[str, str]] = None):
        """
        Initialize template engine.

        Args:
            template_dir: Directory whose templates override the in-memory ones
            templates: In-memory templates keyed by name
        """
        self.template_dir = Path(template_dir) if template_dir else None
        self._templates: Dict[str, str] = dict(templates or {})
        self._env = None
        self._setup_environment()

    def _setup_environment(self):
        """Setup Jinja2 environment with code generation utilities."""
        loader = DictLoader(self._templates)
        if self.template_dir and self.template_dir.exists():
            loader = ChoiceLoader([FileSystemLoader(str(self.template_dir)), loader])
            logger.debug("Using templates from %s", self.template_dir)

        self._env = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml"], default_for_string=False),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

        # Blank lines stay blank inside indented blocks
        self._env.filters["indent"] = self._indent_filter

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Name of template
            context: Variables to pass to template

        Returns:
            Rendered template content
        """
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except JinjaTemplateError as e:
            raise TemplateError(f"Failed to render template {template_name}: {str(e)}") from e

    # Template filters for code generation

    def _indent_filter(self, value: str, spaces: int = 4) -> str:
        """Indent all lines in a string."""
        indent = " " * spaces
        lines = str(value).split("\n")
        return "\n".join(indent + line if line.strip() else line for line in lines)


# Built-in templates

TS_HEADER_TEMPLATE = """\
import { ResponseHandler } from "{{ transport_import }}";

export interface {{ client_interface }} {
{{ i }}request(
{{ i * 2 }}functionName: string,
{{ i * 2 }}functionParams?: any,
{{ i * 2 }}responseHandler?: ResponseHandler
{{ i }}): Promise<any>;
{{ i }}resolve_app_request(app_request_id: number | null, result: any): Promise<void>;
{{ i }}reject_app_request(app_request_id: number | null, error: any): Promise<void>;
}
"""

TS_MODULE_TEMPLATE = """\
// {{ module_name }} module
{% for declaration in declarations %}

{{ declaration }}
{% endfor %}

export class {{ class_name }} {
{{ i }}client: {{ client_interface }};

{{ i }}constructor(client: {{ client_interface }}) {
{{ i * 2 }}this.client = client;
{{ i }}}
{% for method in methods %}

{{ method | indent(indent_size) }}
{% endfor %}
}
"""

TS_DISPATCHER_TEMPLATE = """\
async function dispatch{{ name }}(obj: {{ name }}, params: {{ params_type }}, app_request_id: number | null, client: {{ client_interface }}) {
{{ i }}try {
{{ i * 2 }}let result = {};
{{ i * 2 }}switch (params.type) {
{% for case in cases %}
{{ i * 3 }}case '{{ case.variant }}':
{{ i * 4 }}{{ case.statement }}
{{ i * 4 }}break;
{% endfor %}
{{ i * 2 }}}
{{ i * 2 }}client.resolve_app_request(app_request_id, { type: params.type, ...result });
{{ i }}}
{{ i }}catch (error) {
{{ i * 2 }}client.reject_app_request(app_request_id, error);
{{ i }}}
}"""

MD_MODULE_TEMPLATE = """\
# Module {{ name }}

{% if summary %}
{{ summary }}

{% endif %}
{% if description %}
{{ description }}

{% endif %}
## Functions
{% for link in function_links %}
{{ link }}

{% endfor %}
## Types
{% for link in type_links %}
{{ link }}

{% endfor %}

# Functions
{% for section in function_sections %}
{{ section }}


{% endfor %}
# Types
{% for section in type_sections %}
{{ section }}


{% endfor %}
"""

MD_INDEX_TEMPLATE = """\
# Modules
{% for module in modules %}
## [{{ module.name }}]({{ module.file }}){{ module.summary }}

{% for link in module.function_links %}
{{ link }}

{% endfor %}
{% endfor %}
"""

BUILTIN_TEMPLATES = {
    "ts/header": TS_HEADER_TEMPLATE,
    "ts/module": TS_MODULE_TEMPLATE,
    "ts/dispatcher": TS_DISPATCHER_TEMPLATE,
    "md/module": MD_MODULE_TEMPLATE,
    "md/index": MD_INDEX_TEMPLATE,
}


def create_template_engine(template_dir: Optional[Path] = None) -> TemplateEngine:
    """Create an engine preloaded with the built-in templates."""
    return TemplateEngine(template_dir, BUILTIN_TEMPLATES)
