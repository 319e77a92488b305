"""
TypeScript binding generator implementation.

Generates one ``modules.ts`` with type declarations, variant factories,
app-object callback interfaces and a client class per module.
"""

from typing import Dict, List, NamedTuple, Optional, Tuple

from ...core.config import GeneratorConfig
from ...core.generator import BindingRenderer, GeneratorError
from ...core.naming import lower_first, upper_first
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
    NoneType,
    OptionalType,
)
from ....logging_config import get_logger
from .naming import create_typescript_sanitizer, is_shadowing_builtin
from .types import TypeScriptTypeMapper, external_struct, payload_struct, quote

logger = get_logger(__name__)

# responseType values the transport uses for app requests and notifications
APP_REQUEST = 3
APP_NOTIFY = 4


class Param(NamedTuple):
    """Declared parameter of a generated function."""

    name: str
    type_expr: str
    optional: bool = False
    # expression used with `name?:`, without the null member
    bare_expr: Optional[str] = None


class TypeScriptGenerator(BindingRenderer):
    """Binding renderer producing TypeScript client source."""

    def __init__(self, schema: ResolvedSchema, config: Optional[GeneratorConfig] = None):
        """Initialize TypeScript generator with configuration."""
        super().__init__(schema, config)

        self.sanitizer = create_typescript_sanitizer()
        self.indent = self.config.indent
        self.add_comments = self.config.add_comments
        self.types = TypeScriptTypeMapper(self.indent)

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "typescript"

    @property
    def file_extension(self) -> str:
        """Return TypeScript file extension."""
        return ".ts"

    # Fragments

    def render_type(self, t: ApiType, indent: str = "") -> str:
        return self.types.render(t, indent)

    def render_field(self, field: Field, indent: str = "") -> str:
        return self.types.field(field, indent)

    def render_variant(self, variant: Field, indent: str = "") -> str:
        return self.types.variant(variant, indent)

    def render_const(self, const: Const) -> str:
        return f"{const.name} = {self.types.const_literal(const)}"

    def render_type_def(self, field: Field) -> str:
        t = field.type
        if isinstance(t, EnumOfConstsType) and t.consts and not any(
            c.value_kind == ConstKind.BOOL for c in t.consts
        ):
            members = ",\n".join(f"{self.indent}{self.render_const(c)}" for c in t.consts)
            declaration = f"export enum {field.name} {{\n{members}\n}}"
        else:
            declaration = f"export type {field.name} = {self.render_type(t)};"
        return self._doc_comment(field.summary, field.description) + declaration

    def render_variant_constructors(self, field: Field) -> str:
        if not isinstance(field.type, EnumOfTypesType):
            raise GeneratorError(f"Variant constructors need an enum of types: {field.name}")
        return "\n\n".join(
            self._variant_constructor(field.name, variant) for variant in field.type.variants
        )

    def _variant_constructor(self, enum_name: str, variant: Field) -> str:
        name = f"{lower_first(enum_name)}{variant.name}"
        discriminant = quote(variant.name)
        t = variant.type
        if not variant_has_payload(variant):
            return f"export const {name}: {enum_name} = {discriminant};"

        external = external_struct(t)
        struct = payload_struct(t)
        if external:
            params = [Param("params", external)]
            members = ["...params"]
        elif struct is not None and not struct.is_tuple:
            params = [self._param(self._param_name(f.name), f.type) for f in struct.fields]
            members = [
                f.name if f.name == p.name else f"{f.name}: {p.name}"
                for f, p in zip(struct.fields, params)
            ]
        else:
            value_type = struct.fields[0].type if struct is not None else t
            params = [Param("value", self.render_type(value_type))]
            members = ["value"]

        i2 = self.indent * 2
        body = [f"{i2}type: {discriminant},"] + [f"{i2}{m}," for m in members]
        return (
            self._doc_comment(variant.summary, variant.description)
            + f"export function {name}({self._param_list(params)}): {enum_name} {{\n"
            + f"{self.indent}return {{\n"
            + "\n".join(body)
            + f"\n{self.indent}}};\n"
            + "}"
        )

    def _param_name(self, name: str) -> str:
        return self.sanitizer.sanitize_name(name)

    def _param(self, name: str, t: ApiType) -> Param:
        if isinstance(t, OptionalType):
            return Param(name, self.render_type(t), True, self.render_type(t.inner))
        return Param(name, self.render_type(t))

    @staticmethod
    def _param_list(params: List[Param]) -> str:
        """
        Render a parameter list.

        Optional parameters are declared with ``?`` only when every later
        parameter is optional as well; otherwise they stay ``T | null``.
        """
        parts = []
        for index, param in enumerate(params):
            if param.optional and all(p.optional for p in params[index + 1:]):
                parts.append(f"{param.name}?: {param.bare_expr or param.type_expr}")
            else:
                parts.append(f"{param.name}: {param.type_expr}")
        return ", ".join(parts)

    # Functions

    def _result_decl(self, func: Function) -> str:
        if func.result is None:
            return "void"
        return f"Promise<{self.render_type(func.result)}>"

    def _function_params(self, func: Function) -> Tuple[str, List[str]]:
        """Declared parameter list and transport call arguments of a function."""
        info = self.schema.function_info(func)
        params: List[Param] = []
        args: List[str] = []

        if info.params is not None:
            params.append(self._param("params", info.params.type))
            args.append("params")

        if info.app_object is not None:
            params.append(Param("obj", info.app_object.name))
            args = args or ["undefined"]
            args.append(self._app_object_callback(info.app_object))
        elif info.has_response_handler:
            params.append(Param("responseHandler", "ResponseHandler", True))
            args = args or ["undefined"]
            args.append("responseHandler")

        return self._param_list(params), args

    def _app_object_callback(self, app_object: Module) -> str:
        i = self.indent
        dispatch = f"dispatch{app_object.name}"
        return (
            "(params: any, responseType: number) => {\n"
            f"{i}if (responseType === {APP_REQUEST}) {{\n"
            f"{i * 2}{dispatch}(obj, params.request_data, params.app_request_id, this.client);\n"
            f"{i}}} else if (responseType === {APP_NOTIFY}) {{\n"
            f"{i * 2}{dispatch}(obj, params, null, this.client);\n"
            f"{i}}}\n"
            "}"
        )

    def render_function_signature(self, func: Function) -> str:
        params, _ = self._function_params(func)
        return f"function {func.name}({params}): {self._result_decl(func)};"

    def render_function_body(self, func: Function) -> str:
        params, args = self._function_params(func)
        call_name = f"{self.schema.module_of(func).name}.{func.name}"
        call_args = ", ".join([quote(call_name)] + args)
        # the callback argument spans several lines
        call_args = call_args.replace("\n", f"\n{self.indent}")
        return (
            self._doc_comment(func.summary, func.description)
            + f"{func.name}({params}): {self._result_decl(func)} {{\n"
            + f"{self.indent}return this.client.request({call_args});\n"
            + "}"
        )

    # App objects

    def render_callback_interface(self, app_object: Module) -> str:
        members = []
        for func in app_object.functions:
            params = ""
            if func.params:
                params = f"params: {self.render_type(func.params[0].type)}"
            comment = self._doc_comment(func.summary, None, self.indent)
            members.append(f"{comment}{self.indent}{func.name}({params}): {self._result_decl(func)},")
        return (
            self._doc_comment(app_object.summary, app_object.description)
            + f"export interface {app_object.name} {{\n"
            + "\n".join(members)
            + "\n}"
        )

    def render_dispatcher(self, app_object: Module) -> str:
        """Async helper routing app requests to the callback object."""
        params_type, _ = self.schema.app_object_types(app_object.name)
        variants = params_type.type.variants
        cases = []
        for variant, func in zip(variants, app_object.functions):
            args = "params" if func.params else ""
            call = f"obj.{func.name}({args});"
            if func.result is None:
                statement = call
            elif isinstance(func.result, NoneType):
                statement = f"await {call}"
            else:
                statement = f"result = await {call}"
            cases.append({"variant": variant.name, "statement": statement})

        return self.render_template("ts/dispatcher", {
            "name": app_object.name,
            "params_type": params_type.name,
            "cases": cases,
            "client_interface": self.config.client_interface,
            "i": self.indent,
        })

    # Units

    def render_module(self, module: Module) -> str:
        declarations = []
        for type_field in module.types:
            declarations.append(self.render_type_def(type_field))
            if self.config.emit_constructors and isinstance(type_field.type, EnumOfTypesType):
                declarations.append(self.render_variant_constructors(type_field))

        for app_object in self.schema.app_objects_of(module):
            declarations.append(self.render_callback_interface(app_object))
            declarations.append(self.render_dispatcher(app_object))

        return self.render_template("ts/module", {
            "module_name": module.name,
            "class_name": f"{upper_first(module.name)}{self.config.module_class_suffix}",
            "client_interface": self.config.client_interface,
            "declarations": declarations,
            "methods": [self.render_function_body(f) for f in module.functions],
            "indent_size": self.config.indent_size,
            "i": self.indent,
        })

    def render_header(self) -> str:
        return self.render_template("ts/header", {
            "transport_import": self.config.transport_import,
            "client_interface": self.config.client_interface,
            "i": self.indent,
        })

    def render_all(self) -> str:
        units = [self.render_header()]
        units.extend(self.render_module(m) for m in self.schema.modules)
        return "\n".join(units)

    def output_files(self) -> Dict[str, str]:
        return {"modules.ts": self.render_all()}

    def validate_schema(self) -> List[str]:
        """Validate the schema for TypeScript generation."""
        warnings = super().validate_schema()

        for module in self.schema.modules:
            for type_field in module.types:
                if is_shadowing_builtin(type_field.name):
                    warnings.append(
                        f"Type {module.name}.{type_field.name} shadows a TypeScript global"
                    )
            for func in module.functions:
                if self.sanitizer.is_reserved(func.name):
                    warnings.append(
                        f"Function {module.name}.{func.name} is a TypeScript reserved word"
                    )

        return warnings

    # Comments

    def _doc_comment(self, summary: Optional[str], description: Optional[str],
                     indent: str = "") -> str:
        if not self.add_comments:
            return ""
        paragraphs = [p for p in (summary, description) if p]
        if not paragraphs:
            return ""
        lines = "\n\n".join(paragraphs).split("\n")
        body = "\n".join(f"{indent} * {line}".rstrip() for line in lines)
        return f"{indent}/**\n{body}\n{indent} */\n"


def create_typescript_generator(schema: ResolvedSchema,
                                config: Optional[GeneratorConfig] = None) -> TypeScriptGenerator:
    """Create a TypeScript generator with default configuration."""
    from ...core.config import load_config

    return TypeScriptGenerator(schema, config or load_config("ts"))
