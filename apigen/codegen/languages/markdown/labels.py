"""
Short type labels used in documentation bullets.
"""

from ...core.schema import (
    RESERVED_GENERIC_NAMES,
    AnyType,
    ApiType,
    ArrayType,
    BigIntType,
    BooleanType,
    EnumOfConstsType,
    EnumOfTypesType,
    GenericType,
    NoneType,
    NumberType,
    OptionalType,
    RefType,
    StringType,
    StructType,
    TypeVisitor,
)


def module_file(module_name: str) -> str:
    return f"mod_{module_name}.md"


def type_link(ref: RefType) -> str:
    """Relative link to the documentation of a referenced type."""
    if ref.module_name is None:
        return ref.ref_name
    return f"[{ref.short_name}]({module_file(ref.module_name)}#{ref.short_name})"


class MarkdownTypeLabeler(TypeVisitor):
    """Renders an ``ApiType`` as a one-line label, cross-linking references."""

    def label(self, t: ApiType) -> str:
        return t.accept(self)

    def visit_none(self, t: NoneType) -> str:
        return "void"

    def visit_any(self, t: AnyType) -> str:
        return "any"

    def visit_boolean(self, t: BooleanType) -> str:
        return "boolean"

    def visit_string(self, t: StringType) -> str:
        return "string"

    def visit_number(self, t: NumberType) -> str:
        return "number"

    def visit_big_int(self, t: BigIntType) -> str:
        return "bigint"

    def visit_ref(self, t: RefType) -> str:
        return "any" if t.is_dynamic else type_link(t)

    def visit_optional(self, t: OptionalType) -> str:
        return f"{self.label(t.inner)}?"

    def visit_array(self, t: ArrayType) -> str:
        return f"{self.label(t.item)}[]"

    def visit_struct(self, t: StructType) -> str:
        return "struct"

    def visit_enum_of_consts(self, t: EnumOfConstsType) -> str:
        return "const"

    def visit_enum_of_types(self, t: EnumOfTypesType) -> str:
        return "enum"

    def visit_generic(self, t: GenericType) -> str:
        if t.name in RESERVED_GENERIC_NAMES:
            return "any"
        return f"{t.name}<{', '.join(self.label(a) for a in t.args)}>"
