"""
TypeScript type expressions.

Maps every kind of the schema type union to TypeScript syntax. Struct
members and union variants spread over several lines; the ``indent``
argument is the indentation of the line the expression starts on.
"""

from typing import Iterable, Optional

from ...core.resolver import variant_has_payload
from ...core.schema import (
    RESERVED_GENERIC_NAMES,
    ArrayType,
    BigIntType,
    BooleanType,
    Const,
    ConstKind,
    EnumOfConstsType,
    EnumOfTypesType,
    Field,
    GenericType,
    NoneType,
    NumberType,
    OptionalType,
    RefType,
    StringType,
    StructType,
    AnyType,
    ApiType,
    TypeVisitor,
)


def quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def external_struct(t: ApiType) -> Optional[str]:
    """Name of a non-hoisted struct type a ref points at, if any."""
    if (
        isinstance(t, RefType)
        and t.target is not None
        and not t.target.is_internal
        and isinstance(t.target.type, StructType)
        and not t.target.type.is_tuple
    ):
        return t.short_name
    return None


def payload_struct(t: ApiType) -> Optional[StructType]:
    """Struct carried inline by a variant, directly or through a hoisted type."""
    if isinstance(t, StructType):
        return t
    if (
        isinstance(t, RefType)
        and t.target is not None
        and t.target.is_internal
        and isinstance(t.target.type, StructType)
    ):
        return t.target.type
    return None


class TypeScriptTypeMapper(TypeVisitor):
    """Renders ``ApiType`` values as TypeScript type expressions."""

    def __init__(self, indent_unit: str = "    "):
        self.indent_unit = indent_unit

    def render(self, t: ApiType, indent: str = "") -> str:
        return t.accept(self, indent)

    # Members

    def field(self, field: Field, indent: str = "") -> str:
        if isinstance(field.type, OptionalType):
            return f"{indent}{field.name}?: {self.render(field.type.inner, indent)}"
        return f"{indent}{field.name}: {self.render(field.type, indent)}"

    def fields(self, fields: Iterable[Field], indent: str) -> str:
        return ",\n".join(self.field(f, indent) for f in fields)

    def variant(self, variant: Field, indent: str = "") -> str:
        t = variant.type
        if not variant_has_payload(variant):
            return quote(variant.name)

        external = external_struct(t)
        if external:
            return f"({{ type: {quote(variant.name)} }} & {external})"

        inner = indent + self.indent_unit
        members = [f"{inner}type: {quote(variant.name)}"]
        struct = payload_struct(t)
        if struct is None:
            members.append(f"{inner}value: {self.render(t, inner)}")
        elif struct.is_tuple:
            members.append(f"{inner}value: {self.render(struct.fields[0].type, inner)}")
        else:
            members.extend(self.field(f, inner) for f in struct.fields)
        return "{\n" + ",\n".join(members) + f"\n{indent}}}"

    @staticmethod
    def const_literal(const: Const) -> str:
        if const.value_kind == ConstKind.NONE:
            return quote(const.name)
        if const.value_kind == ConstKind.STRING:
            return quote(const.value)
        return const.value

    # TypeVisitor

    def visit_none(self, t: NoneType, indent: str = "") -> str:
        return "void"

    def visit_any(self, t: AnyType, indent: str = "") -> str:
        return "any"

    def visit_boolean(self, t: BooleanType, indent: str = "") -> str:
        return "boolean"

    def visit_string(self, t: StringType, indent: str = "") -> str:
        return "string"

    def visit_number(self, t: NumberType, indent: str = "") -> str:
        return "number"

    def visit_big_int(self, t: BigIntType, indent: str = "") -> str:
        return "bigint"

    def visit_ref(self, t: RefType, indent: str = "") -> str:
        return "any" if t.is_dynamic else t.short_name

    def visit_optional(self, t: OptionalType, indent: str = "") -> str:
        return f"{self.render(t.inner, indent)} | null"

    def visit_array(self, t: ArrayType, indent: str = "") -> str:
        item = self.render(t.item, indent)
        if " | " in item:
            return f"({item})[]"
        return f"{item}[]"

    def visit_struct(self, t: StructType, indent: str = "") -> str:
        if t.is_tuple:
            return self.render(t.fields[0].type, indent)
        if not t.fields:
            return "{}"
        return "{\n" + self.fields(t.fields, indent + self.indent_unit) + f"\n{indent}}}"

    def visit_enum_of_consts(self, t: EnumOfConstsType, indent: str = "") -> str:
        if not t.consts:
            return "never"
        return " | ".join(self.const_literal(c) for c in t.consts)

    def visit_enum_of_types(self, t: EnumOfTypesType, indent: str = "") -> str:
        if not t.variants:
            return "never"
        return " | ".join(self.variant(v, indent) for v in t.variants)

    def visit_generic(self, t: GenericType, indent: str = "") -> str:
        if t.name in RESERVED_GENERIC_NAMES:
            return "any"
        args = ", ".join(self.render(a, indent) for a in t.args)
        return f"{t.name}<{args}>"
