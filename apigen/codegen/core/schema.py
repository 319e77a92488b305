"""
Core schema representation for code generation.

Converts the raw API document produced by the library's reflection layer
into immutable model objects that the resolver links and the renderers
read. Types form a closed tagged union; renderers dispatch on it through
``TypeVisitor``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from .docs import split_doc

# Refs that denote an untyped JSON value and are never resolved
DYNAMIC_REF_NAMES = frozenset({"Value", "API"})

# Generic names with special meaning during resolution and rendering
CLIENT_RESULT = "ClientResult"
APP_OBJECT = "AppObject"
ARC = "Arc"
RESERVED_GENERIC_NAMES = frozenset({ARC, APP_OBJECT})

# Arguments of the Arc sentinel
CLIENT_CONTEXT = "ClientContext"
REQUEST = "Request"


class SchemaError(Exception):
    """Raised for malformed schemas and failed resolution."""

    def __init__(self, message: str, name: Optional[str] = None):
        super().__init__(message)
        self.name = name


class TypeKind(Enum):
    """Tags of the API type union."""

    NONE = "None"
    ANY = "Any"
    BOOLEAN = "Boolean"
    STRING = "String"
    NUMBER = "Number"
    BIG_INT = "BigInt"
    REF = "Ref"
    OPTIONAL = "Optional"
    ARRAY = "Array"
    STRUCT = "Struct"
    ENUM_OF_CONSTS = "EnumOfConsts"
    ENUM_OF_TYPES = "EnumOfTypes"
    GENERIC = "Generic"


class NumberKind(Enum):
    """Numeric flavours of Number and BigInt."""

    UINT = "UInt"
    INT = "Int"
    FLOAT = "Float"


class ConstKind(Enum):
    """Value kinds of enumeration constants."""

    NONE = "None"
    BOOL = "Bool"
    STRING = "String"
    NUMBER = "Number"


class TypeVisitor(ABC):
    """Exhaustive dispatch over every ``TypeKind``.

    Subclasses must implement one method per kind; a visitor that misses a
    kind cannot be instantiated.
    """

    @abstractmethod
    def visit_none(self, t: "NoneType", *args: Any) -> Any: ...

    @abstractmethod
    def visit_any(self, t: "AnyType", *args: Any) -> Any: ...

    @abstractmethod
    def visit_boolean(self, t: "BooleanType", *args: Any) -> Any: ...

    @abstractmethod
    def visit_string(self, t: "StringType", *args: Any) -> Any: ...

    @abstractmethod
    def visit_number(self, t: "NumberType", *args: Any) -> Any: ...

    @abstractmethod
    def visit_big_int(self, t: "BigIntType", *args: Any) -> Any: ...

    @abstractmethod
    def visit_ref(self, t: "RefType", *args: Any) -> Any: ...

    @abstractmethod
    def visit_optional(self, t: "OptionalType", *args: Any) -> Any: ...

    @abstractmethod
    def visit_array(self, t: "ArrayType", *args: Any) -> Any: ...

    @abstractmethod
    def visit_struct(self, t: "StructType", *args: Any) -> Any: ...

    @abstractmethod
    def visit_enum_of_consts(self, t: "EnumOfConstsType", *args: Any) -> Any: ...

    @abstractmethod
    def visit_enum_of_types(self, t: "EnumOfTypesType", *args: Any) -> Any: ...

    @abstractmethod
    def visit_generic(self, t: "GenericType", *args: Any) -> Any: ...


@dataclass(frozen=True)
class ApiType(ABC):
    """Base of the type union."""

    kind: ClassVar[TypeKind]

    @abstractmethod
    def accept(self, visitor: TypeVisitor, *args: Any) -> Any:
        """Dispatch to the visitor method for this kind."""


@dataclass(frozen=True)
class NoneType(ApiType):
    kind: ClassVar[TypeKind] = TypeKind.NONE

    def accept(self, visitor: TypeVisitor, *args: Any) -> Any:
        return visitor.visit_none(self, *args)


@dataclass(frozen=True)
class AnyType(ApiType):
    kind: ClassVar[TypeKind] = TypeKind.ANY

    def accept(self, visitor: TypeVisitor, *args: Any) -> Any:
        return visitor.visit_any(self, *args)


@dataclass(frozen=True)
class BooleanType(ApiType):
    kind: ClassVar[TypeKind] = TypeKind.BOOLEAN

    def accept(self, visitor: TypeVisitor, *args: Any) -> Any:
        return visitor.visit_boolean(self, *args)


@dataclass(frozen=True)
class StringType(ApiType):
    kind: ClassVar[TypeKind] = TypeKind.STRING

    def accept(self, visitor: TypeVisitor, *args: Any) -> Any:
        return visitor.visit_string(self, *args)


@dataclass(frozen=True)
class NumberType(ApiType):
    number_type: NumberKind = NumberKind.INT
    number_size: int = 32
    kind: ClassVar[TypeKind] = TypeKind.NUMBER

    def accept(self, visitor: TypeVisitor, *args: Any) -> Any:
        return visitor.visit_number(self, *args)


@dataclass(frozen=True)
class BigIntType(ApiType):
    number_type: NumberKind = NumberKind.INT
    number_size: int = 64
    kind: ClassVar[TypeKind] = TypeKind.BIG_INT

    def accept(self, visitor: TypeVisitor, *args: Any) -> Any:
        return visitor.visit_big_int(self, *args)


@dataclass(frozen=True)
class RefType(ApiType):
    """Reference to a named type.

    After resolution ``ref_name`` is qualified (``module.Name``) and
    ``target`` links the ``Field`` it denotes. Dynamic refs stay unbound.
    """

    ref_name: str
    target: Optional["Field"] = field(default=None, compare=False, repr=False)
    kind: ClassVar[TypeKind] = TypeKind.REF

    def accept(self, visitor: TypeVisitor, *args: Any) -> Any:
        return visitor.visit_ref(self, *args)

    @property
    def is_dynamic(self) -> bool:
        return self.ref_name in DYNAMIC_REF_NAMES

    @property
    def short_name(self) -> str:
        return self.ref_name.split(".")[-1]

    @property
    def module_name(self) -> Optional[str]:
        parts = self.ref_name.split(".")
        return parts[0] if len(parts) == 2 else None

    def bind(self, target: "Field") -> None:
        """Link the resolved target. A ref can be bound only once."""
        if self.target is not None:
            raise SchemaError(f"Reference already bound: {self.ref_name}", self.ref_name)
        object.__setattr__(self, "target", target)


@dataclass(frozen=True)
class OptionalType(ApiType):
    inner: ApiType
    kind: ClassVar[TypeKind] = TypeKind.OPTIONAL

    def accept(self, visitor: TypeVisitor, *args: Any) -> Any:
        return visitor.visit_optional(self, *args)


@dataclass(frozen=True)
class ArrayType(ApiType):
    item: ApiType
    kind: ClassVar[TypeKind] = TypeKind.ARRAY

    def accept(self, visitor: TypeVisitor, *args: Any) -> Any:
        return visitor.visit_array(self, *args)


@dataclass(frozen=True)
class StructType(ApiType):
    fields: Tuple["Field", ...] = ()
    kind: ClassVar[TypeKind] = TypeKind.STRUCT

    def accept(self, visitor: TypeVisitor, *args: Any) -> Any:
        return visitor.visit_struct(self, *args)

    @property
    def is_tuple(self) -> bool:
        """True for a transparent wrapper around a single unnamed field."""
        return len(self.fields) == 1 and self.fields[0].name == ""


@dataclass(frozen=True)
class EnumOfConstsType(ApiType):
    consts: Tuple["Const", ...] = ()
    kind: ClassVar[TypeKind] = TypeKind.ENUM_OF_CONSTS

    def accept(self, visitor: TypeVisitor, *args: Any) -> Any:
        return visitor.visit_enum_of_consts(self, *args)


@dataclass(frozen=True)
class EnumOfTypesType(ApiType):
    variants: Tuple["Field", ...] = ()
    kind: ClassVar[TypeKind] = TypeKind.ENUM_OF_TYPES

    def accept(self, visitor: TypeVisitor, *args: Any) -> Any:
        return visitor.visit_enum_of_types(self, *args)

    def variant(self, name: str) -> Optional["Field"]:
        for variant in self.variants:
            if variant.name == name:
                return variant
        return None


@dataclass(frozen=True)
class GenericType(ApiType):
    name: str
    args: Tuple[ApiType, ...] = ()
    kind: ClassVar[TypeKind] = TypeKind.GENERIC

    def accept(self, visitor: TypeVisitor, *args: Any) -> Any:
        return visitor.visit_generic(self, *args)


@dataclass(frozen=True)
class Field:
    """A named occurrence of a type: struct member, parameter or type definition."""

    name: str
    type: ApiType
    summary: Optional[str] = None
    description: Optional[str] = None
    is_internal: bool = False


@dataclass(frozen=True)
class Const:
    """Member of an ``EnumOfConsts``."""

    name: str
    value_kind: ConstKind = ConstKind.NONE
    value: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class ApiError:
    code: int
    message: str
    data: Any = None


@dataclass(frozen=True)
class Function:
    """API function. ``result`` of ``None`` means the call has no result."""

    name: str
    params: Tuple[Field, ...] = ()
    result: Optional[ApiType] = field(default_factory=NoneType)
    summary: Optional[str] = None
    description: Optional[str] = None
    errors: Optional[Tuple[ApiError, ...]] = None


@dataclass(frozen=True)
class Module:
    name: str
    types: Tuple[Field, ...] = ()
    functions: Tuple[Function, ...] = ()
    summary: Optional[str] = None
    description: Optional[str] = None

    def get_type(self, name: str) -> Optional[Field]:
        for type_field in self.types:
            if type_field.name == name:
                return type_field
        return None

    def get_function(self, name: str) -> Optional[Function]:
        for func in self.functions:
            if func.name == name:
                return func
        return None


@dataclass(frozen=True)
class Schema:
    version: str
    modules: Tuple[Module, ...] = ()

    def get_module(self, name: str) -> Optional[Module]:
        for module in self.modules:
            if module.name == name:
                return module
        return None


# Parsing


def _require(node: Dict[str, Any], key: str, context: str) -> Any:
    if not isinstance(node, dict):
        raise SchemaError(f"Expected an object for {context}, got {type(node).__name__}", context)
    if key not in node:
        raise SchemaError(f"Missing '{key}' in {context}", context)
    return node[key]


def _list(node: Dict[str, Any], key: str, context: str, required: bool = True) -> List[Any]:
    value = _require(node, key, context) if required else node.get(key, [])
    if not isinstance(value, list):
        raise SchemaError(
            f"Expected a list for '{key}' in {context}, got {type(value).__name__}", context
        )
    return value


def _number_size(node: Dict[str, Any], default: int, context: str) -> int:
    size = node.get("number_size", default)
    if isinstance(size, bool) or not isinstance(size, int):
        raise SchemaError(f"Invalid number size {size!r} in {context}", context)
    return size



def _docs(node: Dict[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    return split_doc(node.get("summary"), node.get("description"))


def _number_kind(node: Dict[str, Any], context: str) -> NumberKind:
    raw = node.get("number_type", NumberKind.INT.value)
    try:
        return NumberKind(raw)
    except ValueError:
        raise SchemaError(f"Unknown number type '{raw}' in {context}", context)


def parse_type(node: Dict[str, Any], context: str = "type") -> ApiType:
    """Convert a raw type node into an ``ApiType``.

    Args:
        node: Raw node carrying a ``type`` tag plus kind-specific keys
        context: Qualified name used in error messages

    Returns:
        ApiType: The parsed (unresolved) type
    """
    tag = _require(node, "type", context)
    try:
        kind = TypeKind(tag)
    except ValueError:
        raise SchemaError(f"Unknown type tag '{tag}' in {context}", context)

    if kind == TypeKind.NONE:
        return NoneType()
    if kind == TypeKind.ANY:
        return AnyType()
    if kind == TypeKind.BOOLEAN:
        return BooleanType()
    if kind == TypeKind.STRING:
        return StringType()
    if kind == TypeKind.NUMBER:
        return NumberType(_number_kind(node, context), _number_size(node, 32, context))
    if kind == TypeKind.BIG_INT:
        return BigIntType(_number_kind(node, context), _number_size(node, 64, context))
    if kind == TypeKind.REF:
        return RefType(_require(node, "ref_name", context))
    if kind == TypeKind.OPTIONAL:
        return OptionalType(parse_type(_require(node, "optional_inner", context), context))
    if kind == TypeKind.ARRAY:
        return ArrayType(parse_type(_require(node, "array_item", context), context))
    if kind == TypeKind.STRUCT:
        fields = tuple(
            parse_field(f, context) for f in _list(node, "struct_fields", context)
        )
        if len(fields) > 1 and any(f.name == "" for f in fields):
            raise SchemaError(
                f"Tuple struct in {context} must have exactly one unnamed field", context
            )
        return StructType(fields)
    if kind == TypeKind.ENUM_OF_CONSTS:
        return EnumOfConstsType(
            tuple(parse_const(c, context) for c in _list(node, "enum_consts", context))
        )
    if kind == TypeKind.ENUM_OF_TYPES:
        return EnumOfTypesType(
            tuple(parse_field(v, context) for v in _list(node, "enum_types", context))
        )
    # TypeKind.GENERIC
    return GenericType(
        _require(node, "generic_name", context),
        tuple(parse_type(a, context) for a in _list(node, "generic_args", context, required=False)),
    )


def parse_field(node: Dict[str, Any], context: str = "") -> Field:
    name = node.get("name", "") if isinstance(node, dict) else ""
    qualified = f"{context}.{name}" if context and name else (context or name)
    summary, description = _docs(node) if isinstance(node, dict) else (None, None)
    return Field(
        name=name,
        type=parse_type(node, qualified),
        summary=summary,
        description=description,
        is_internal=bool(node.get("isInternal", False)),
    )


def _const_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def parse_const(node: Dict[str, Any], context: str = "") -> Const:
    name = _require(node, "name", context)
    raw_kind = node.get("type", ConstKind.NONE.value)
    try:
        value_kind = ConstKind(raw_kind)
    except ValueError:
        raise SchemaError(f"Unknown const kind '{raw_kind}' in {context}.{name}", f"{context}.{name}")
    value = node.get("value")
    if value_kind != ConstKind.NONE and value is None:
        raise SchemaError(f"Const {context}.{name} has no value", f"{context}.{name}")
    summary, description = _docs(node)
    return Const(
        name=name,
        value_kind=value_kind,
        value=None if value is None else _const_value(value),
        summary=summary,
        description=description,
    )


def _parse_error(node: Dict[str, Any], context: str) -> ApiError:
    return ApiError(
        _require(node, "code", f"{context}.errors"),
        _require(node, "message", f"{context}.errors"),
        node.get("data"),
    )


def parse_function(node: Dict[str, Any], module_name: str) -> Function:
    name = _require(node, "name", f"function in {module_name}")
    qualified = f"{module_name}.{name}"
    summary, description = _docs(node)
    errors = node.get("errors")
    if errors is not None:
        errors = _list(node, "errors", qualified)
    return Function(
        name=name,
        params=tuple(
            parse_field(p, qualified)
            for p in _list(node, "params", qualified, required=False)
        ),
        result=parse_type(_require(node, "result", qualified), f"{qualified}.result"),
        summary=summary,
        description=description,
        errors=None
        if errors is None
        else tuple(_parse_error(e, qualified) for e in errors),
    )


def parse_module(node: Dict[str, Any]) -> Module:
    name = _require(node, "name", "module")
    summary, description = _docs(node)
    return Module(
        name=name,
        types=tuple(
            parse_field(t, name) for t in _list(node, "types", name, required=False)
        ),
        functions=tuple(
            parse_function(f, name)
            for f in _list(node, "functions", name, required=False)
        ),
        summary=summary,
        description=description,
    )


def parse_schema(raw: Dict[str, Any]) -> Schema:
    """
    Convert a raw API document into an unresolved ``Schema``.

    Args:
        raw: Parsed JSON document ``{version, modules}``

    Returns:
        Schema: Model with unresolved references

    Raises:
        SchemaError: If the document is malformed
    """
    if not isinstance(raw, dict):
        raise SchemaError(f"Schema document must be an object, got {type(raw).__name__}")
    version = _require(raw, "version", "schema")
    modules: List[Module] = [parse_module(m) for m in _list(raw, "modules", "schema")]
    return Schema(version=str(version), modules=tuple(modules))
