"""
Markdown documentation generator implementation.

Walks the resolved schema and writes one page per module plus an index.
Every code sample is produced by the wrapped binding renderer; only the
prose comes from the schema's summaries and descriptions.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from ...core.config import GeneratorConfig
from ...core.generator import BindingRenderer, Renderer
from ...core.resolver import ResolvedSchema, variant_has_payload
from ...core.schema import (
    ApiType,
    Const,
    ConstKind,
    EnumOfConstsType,
    EnumOfTypesType,
    Field,
    Function,
    Module,
    OptionalType,
    RefType,
    StructType,
)
from ....logging_config import get_logger
from ..typescript import TypeScriptGenerator
from ..typescript.types import external_struct, payload_struct
from .labels import MarkdownTypeLabeler, module_file

logger = get_logger(__name__)

RESPONSE_HANDLER_DOC = "- `responseHandler`?: _ResponseHandler_ – additional responses handler.\n"


def summary(text: Optional[str]) -> str:
    return f" – {text}" if text else ""


def prose(summary_text: Optional[str], description: Optional[str]) -> str:
    return "".join(f"{p}\n\n" for p in (summary_text, description) if p)


class DocsGenerator(Renderer):
    """Documentation renderer wrapping a binding renderer by delegation."""

    def __init__(self, schema: ResolvedSchema, config: Optional[GeneratorConfig] = None,
                 code: Optional[BindingRenderer] = None):
        """
        Initialize documentation generator.

        Args:
            schema: Resolved schema to document
            config: Generator configuration
            code: Binding renderer producing the embedded code samples
        """
        super().__init__(schema, config)
        self.code = code if code is not None else TypeScriptGenerator(schema, self.config)
        self.labels = MarkdownTypeLabeler()

    @property
    def language_name(self) -> str:
        return "markdown"

    @property
    def file_extension(self) -> str:
        return ".md"

    @property
    def index_file(self) -> str:
        return self.config.custom.get("index_file", "modules.md")

    # Fields and types

    def field(self, field: Field) -> str:
        t = field.type
        optional = ""
        if isinstance(t, OptionalType):
            optional = "?"
            t = t.inner
        name = f"`{field.name}`{optional}: " if field.name else ""
        return f"- {name}_{self.labels.label(t)}_{summary(field.summary)}\n"

    def fields(self, fields: Iterable[Field]) -> str:
        return "".join(self.field(f) for f in fields)

    def const(self, const: Const) -> str:
        value = const.name if const.value_kind == ConstKind.NONE else const.value
        return f"- `{value}`{summary(const.summary)}\n"

    def describe(self, t: ApiType, seen: Tuple[str, ...] = ()) -> str:
        """Flatten a type into bullets of fields, variants or values."""
        if isinstance(t, RefType):
            if t.is_dynamic or t.target is None or t.ref_name in seen:
                return self.field(Field("", t))
            return self.describe(t.target.type, seen + (t.ref_name,))
        if isinstance(t, OptionalType):
            return f"Optional value of:\n\n{self.describe(t.inner, seen)}"
        if isinstance(t, StructType):
            return self.fields(t.fields)
        if isinstance(t, EnumOfTypesType):
            variants = "\n".join(self.variant(v) for v in t.variants)
            return f"Depends on value of the `type` field.\n\n{variants}"
        if isinstance(t, EnumOfConstsType):
            consts = "".join(self.const(c) for c in t.consts)
            return f"One of the following value:\n\n{consts}"
        return self.field(Field("", t))

    @staticmethod
    def variant_fields(variant: Field) -> List[Field]:
        """Payload members of a variant as they appear next to the discriminant."""
        t = variant.type
        struct = payload_struct(t)
        if struct is None and external_struct(t):
            struct = t.target.type
        if struct is None:
            return [Field("value", t)]
        if struct.is_tuple:
            inner = struct.fields[0]
            return [Field("value", inner.type, inner.summary, inner.description)]
        return list(struct.fields)

    def variant(self, variant: Field) -> str:
        md = f"When type is '{variant.name}'\n\n"
        if not variant_has_payload(variant):
            return md + f"`{variant.name}`\n"
        if variant.summary:
            md += f"{variant.summary}\n\n"
        return md + self.fields(self.variant_fields(variant))

    # Sections

    def render_type_def(self, field: Field) -> str:
        md = f"## {field.name}\n\n{prose(field.summary, field.description)}"
        md += f"```{self.code.code_fence}\n{self.code.render_type_def(field)}\n```\n"
        md += self.describe(field.type)
        return md

    def _code_sample(self, func: Function) -> str:
        info = self.schema.function_info(func)
        code = []
        if info.params is not None:
            params = info.params.type
            if isinstance(params, RefType) and params.target is not None:
                code.append(self.code.render_type_def(params.target))
        if isinstance(func.result, RefType) and func.result.target is not None:
            code.append(self.code.render_type_def(func.result.target))
        if info.app_object is not None:
            code.append(self.code.render_callback_interface(info.app_object))
        code.append(self.code.render_function_signature(func))
        return f"```{self.code.code_fence}\n" + "\n\n".join(code) + "\n```\n"

    def render_function(self, func: Function) -> str:
        info = self.schema.function_info(func)
        md = f"## {func.name}\n\n{prose(func.summary, func.description)}"
        md += self._code_sample(func)

        if info.params is not None or info.has_response_handler or info.app_object is not None:
            md += "### Parameters\n\n"
            if info.params is not None:
                md += self.describe(info.params.type)
            if info.has_response_handler:
                md += RESPONSE_HANDLER_DOC
            if info.app_object is not None:
                app_object = info.app_object
                md += f"- `obj`: _{app_object.name}_{summary(app_object.summary)}\n"

        if func.result is not None:
            md += f"\n### Result\n\n{self.describe(func.result)}"
        return md

    # Pages

    def _module_page(self, module: Module) -> str:
        return self.render_template("md/module", {
            "name": module.name,
            "summary": module.summary,
            "description": module.description,
            "function_links": [
                f"[{f.name}](#{f.name}){summary(f.summary)}" for f in module.functions
            ],
            "type_links": [
                f"[{t.name}](#{t.name}){summary(t.summary)}" for t in module.types
            ],
            "function_sections": [self.render_function(f) for f in module.functions],
            "type_sections": [self.render_type_def(t) for t in module.types],
        })

    def render_module(self, module: Module) -> str:
        pages = [self._module_page(module)]
        for app_object in self.schema.app_objects_of(module):
            logger.debug("Documenting app object %s in %s", app_object.name, module.name)
            pages.append(self._module_page(app_object))
        return "\n".join(pages)

    def render_index(self) -> str:
        modules = []
        for module in self.schema.modules:
            file_name = module_file(module.name)
            modules.append({
                "name": module.name,
                "file": file_name,
                "summary": summary(module.summary),
                "function_links": [
                    f"[{f.name}]({file_name}#{f.name}){summary(f.summary)}"
                    for f in module.functions
                ],
            })
        return self.render_template("md/index", {"modules": modules})

    def render_all(self) -> str:
        pages = [self.render_index()]
        pages.extend(self.render_module(m) for m in self.schema.modules)
        return "\n".join(pages)

    def output_files(self) -> Dict[str, str]:
        files = {self.index_file: self.render_index()}
        for module in self.schema.modules:
            files[module_file(module.name)] = self.render_module(module)
        return files


def create_docs_generator(schema: ResolvedSchema,
                          config: Optional[GeneratorConfig] = None) -> DocsGenerator:
    """Create a documentation generator with default configuration."""
    from ...core.config import load_config

    return DocsGenerator(schema, config or load_config("docs"))
