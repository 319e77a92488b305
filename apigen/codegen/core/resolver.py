"""
Linking and reference resolution of a parsed schema.

Turns the raw document into a ``ResolvedSchema``: enum variant payloads
are hoisted into named module types, ``ClientResult<T>`` results are
unwrapped, every reference is qualified and bound to its target, and
``AppObject<Params, Result>`` parameters get a synthesized pseudo-module.
The resolved graph is read-only; ownership lives in side tables.
"""

import json
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ...logging_config import get_logger
from .naming import pascal_to_snake
from .schema import (
    APP_OBJECT,
    ARC,
    CLIENT_RESULT,
    REQUEST,
    ApiType,
    ArrayType,
    EnumOfTypesType,
    Field,
    Function,
    GenericType,
    Module,
    NoneType,
    OptionalType,
    RefType,
    Schema,
    SchemaError,
    StructType,
    parse_schema,
)

logger = get_logger(__name__)

PARAMS_PREFIX = "ParamsOf"


@dataclass(frozen=True)
class FunctionInfo:
    """Call shape of a function.

    ``has_response_handler`` and ``app_object`` are mutually exclusive.
    """

    params: Optional[Field] = None
    has_response_handler: bool = False
    app_object: Optional[Module] = None


def hoisted_variant_name(enum_name: str, variant_name: str) -> str:
    return f"{enum_name}{variant_name}Variant"


def variant_struct(variant: Optional[Field]) -> Optional[StructType]:
    """Return the struct carried by an enum variant, following one bound ref."""
    if variant is None:
        return None
    if isinstance(variant.type, StructType):
        return variant.type
    if isinstance(variant.type, RefType) and variant.type.target is not None:
        target_type = variant.type.target.type
        if isinstance(target_type, StructType):
            return target_type
    return None


def variant_has_payload(variant: Field) -> bool:
    if isinstance(variant.type, NoneType):
        return False
    struct = variant_struct(variant)
    return struct is None or len(struct.fields) > 0


class ResolvedSchema:
    """Fully linked, read-only schema graph."""

    def __init__(
        self,
        schema: Schema,
        types: Dict[str, Field],
        owners: Dict[int, Module],
        function_infos: Dict[int, FunctionInfo],
        app_objects: Dict[str, Module],
        collisions: Dict[str, Tuple[str, ...]],
        app_object_types: Optional[Dict[str, Tuple[Field, Field]]] = None,
    ):
        self._schema = schema
        self._types = MappingProxyType(dict(types))
        self._owners = MappingProxyType(dict(owners))
        self._function_infos = MappingProxyType(dict(function_infos))
        self._app_objects = MappingProxyType(dict(app_objects))
        self._collisions = MappingProxyType(dict(collisions))
        self._app_object_types = MappingProxyType(dict(app_object_types or {}))

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def version(self) -> str:
        return self._schema.version

    @property
    def modules(self) -> Tuple[Module, ...]:
        return self._schema.modules

    @property
    def app_objects(self) -> Mapping[str, Module]:
        return self._app_objects

    @property
    def collisions(self) -> Mapping[str, Tuple[str, ...]]:
        """Bare type names defined by more than one module."""
        return self._collisions

    def app_object_types(self, name: str) -> Tuple[Field, Field]:
        """Return the (Params, Result) enum definitions an app object was built from."""
        try:
            return self._app_object_types[name]
        except KeyError:
            raise SchemaError(f"Unknown app object: {name}", name)

    def find_type(self, name: str) -> Optional[Field]:
        """Look up a module-level type by qualified name."""
        return self._types.get(name)

    def module_of(self, entity: Union[Field, Function]) -> Module:
        """Return the module owning a type or function of this graph."""
        try:
            return self._owners[id(entity)]
        except KeyError:
            raise SchemaError(f"'{getattr(entity, 'name', entity)}' is not part of this schema")

    def qualified_name(self, entity: Union[Field, Function]) -> str:
        return f"{self.module_of(entity).name}.{entity.name}"

    def function_info(self, func: Function) -> FunctionInfo:
        return self._function_infos.get(id(func), FunctionInfo())

    def app_objects_of(self, module: Module) -> Tuple[Module, ...]:
        """App objects owned by ``module``, the first module with a function taking them."""
        owners: Dict[str, Tuple[str, Module]] = {}
        for owner in self.modules:
            for func in owner.functions:
                app_object = self.function_info(func).app_object
                if app_object is not None:
                    owners.setdefault(app_object.name, (owner.name, app_object))
        return tuple(app_object for name, app_object in owners.values() if name == module.name)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ResolvedSchema):
            return NotImplemented
        return self._schema == other._schema and dict(self._app_objects) == dict(other._app_objects)



class SchemaResolver:
    """One-shot resolver; create one per schema."""

    def __init__(self, schema: Schema):
        self.schema = schema
        self._qualified: Dict[str, Field] = {}
        self._bare: Dict[str, List[str]] = {}
        self._pending: List[Tuple[RefType, str]] = []
        self._app_objects: Dict[str, Module] = {}
        self._app_object_types: Dict[str, Tuple[Field, Field]] = {}
        self._owners: Dict[int, Module] = {}

    def resolve(self) -> ResolvedSchema:
        hoisted = [self._hoist_variants(m) for m in self.schema.modules]
        self._register_types(hoisted)

        modules = tuple(self._resolve_module(m) for m in hoisted)
        types: Dict[str, Field] = {}
        for module in modules:
            for type_field in module.types:
                types[f"{module.name}.{type_field.name}"] = type_field
                self._owners[id(type_field)] = module
            for func in module.functions:
                self._owners[id(func)] = module

        for ref, qualified in self._pending:
            ref.bind(types[qualified])
            logger.debug("Bound %s", qualified)

        function_infos: Dict[int, FunctionInfo] = {}
        for module in modules:
            for func in module.functions:
                function_infos[id(func)] = self._function_info(module, func)

        for app_object in self._app_objects.values():
            for func in app_object.functions:
                self._owners[id(func)] = app_object
                function_infos[id(func)] = self._function_info(app_object, func)

        collisions = {
            name: tuple(sorted(q.split(".")[0] for q in names))
            for name, names in self._bare.items()
            if len(names) > 1
        }
        resolved = ResolvedSchema(
            Schema(self.schema.version, modules),
            types,
            self._owners,
            function_infos,
            self._app_objects,
            collisions,
            self._app_object_types,
        )
        logger.info(
            "Resolved schema %s: %d modules, %d types, %d app objects",
            resolved.version,
            len(modules),
            len(types),
            len(self._app_objects),
        )
        return resolved

    # Linking

    def _hoist_variants(self, module: Module) -> Module:
        """Promote inline struct payloads of enum variants to module types."""
        types: List[Field] = []
        for type_field in module.types:
            if isinstance(type_field.type, EnumOfTypesType):
                variants: List[Field] = []
                for variant in type_field.type.variants:
                    if isinstance(variant.type, StructType):
                        name = hoisted_variant_name(type_field.name, variant.name)
                        types.append(Field(
                            name=name,
                            type=variant.type,
                            summary=variant.summary,
                            description=variant.description,
                            is_internal=True,
                        ))
                        variants.append(Field(
                            name=variant.name,
                            type=RefType(f"{module.name}.{name}"),
                            summary=variant.summary,
                            description=variant.description,
                        ))
                        logger.debug("Hoisted %s.%s", module.name, name)
                    else:
                        variants.append(variant)
                type_field = Field(
                    name=type_field.name,
                    type=EnumOfTypesType(tuple(variants)),
                    summary=type_field.summary,
                    description=type_field.description,
                    is_internal=type_field.is_internal,
                )
            types.append(type_field)
        return Module(
            name=module.name,
            types=tuple(types),
            functions=module.functions,
            summary=module.summary,
            description=module.description,
        )

    def _register_types(self, modules: List[Module]) -> None:
        for module in modules:
            for type_field in module.types:
                qualified = f"{module.name}.{type_field.name}"
                if qualified in self._qualified:
                    raise SchemaError(f"Duplicate type definition: {qualified}", qualified)
                self._qualified[qualified] = type_field
                self._bare.setdefault(type_field.name, []).append(qualified)

        for name, qualified_names in self._bare.items():
            if len(qualified_names) > 1:
                logger.warning(
                    "Type name %s is defined in several modules: %s",
                    name,
                    ", ".join(qualified_names),
                )

    # Reference resolution

    def _lookup(self, ref_name: str, owner: str, context: str) -> str:
        if ref_name in self._qualified:
            return ref_name
        if "." not in ref_name:
            scoped = f"{owner}.{ref_name}"
            if scoped in self._qualified:
                return scoped
            candidates = self._bare.get(ref_name, [])
            if len(candidates) == 1:
                return candidates[0]
            if len(candidates) > 1:
                raise SchemaError(
                    f"Ambiguous reference '{ref_name}' in {context}: defined in "
                    f"{', '.join(candidates)}; qualify it with a module name",
                    ref_name,
                )
        raise SchemaError(f"Unresolved reference '{ref_name}' in {context}", ref_name)

    def _resolve_type(self, t: ApiType, owner: str, context: str) -> ApiType:
        if isinstance(t, RefType):
            if t.is_dynamic:
                return RefType(t.ref_name)
            qualified = self._lookup(t.ref_name, owner, context)
            ref = RefType(qualified)
            self._pending.append((ref, qualified))
            return ref
        if isinstance(t, OptionalType):
            return OptionalType(self._resolve_type(t.inner, owner, context))
        if isinstance(t, ArrayType):
            return ArrayType(self._resolve_type(t.item, owner, context))
        if isinstance(t, StructType):
            return StructType(tuple(self._resolve_field(f, owner, context) for f in t.fields))
        if isinstance(t, EnumOfTypesType):
            return EnumOfTypesType(
                tuple(self._resolve_field(v, owner, context) for v in t.variants)
            )
        if isinstance(t, GenericType):
            if t.name == ARC:
                return t
            return GenericType(
                t.name, tuple(self._resolve_type(a, owner, context) for a in t.args)
            )
        return t

    def _resolve_field(self, f: Field, owner: str, context: str) -> Field:
        qualified = f"{context}.{f.name}" if f.name else context
        return Field(
            name=f.name,
            type=self._resolve_type(f.type, owner, qualified),
            summary=f.summary,
            description=f.description,
            is_internal=f.is_internal,
        )

    def _resolve_function(self, module: Module, func: Function) -> Function:
        context = f"{module.name}.{func.name}"
        result = func.result
        if isinstance(result, GenericType) and result.name == CLIENT_RESULT:
            if len(result.args) != 1:
                raise SchemaError(f"{CLIENT_RESULT} of {context} must have one argument", context)
            result = result.args[0]
        return Function(
            name=func.name,
            params=tuple(self._resolve_field(p, module.name, context) for p in func.params),
            result=None if result is None else self._resolve_type(result, module.name, f"{context}.result"),
            summary=func.summary,
            description=func.description,
            errors=func.errors,
        )

    def _resolve_module(self, module: Module) -> Module:
        return Module(
            name=module.name,
            types=tuple(
                self._resolve_field(t, module.name, module.name)
                for t in module.types
            ),
            functions=tuple(self._resolve_function(module, f) for f in module.functions),
            summary=module.summary,
            description=module.description,
        )

    # Function call shapes

    def _function_info(self, module: Module, func: Function) -> FunctionInfo:
        params = None
        has_response_handler = False
        app_object = None
        for param in func.params:
            t = param.type
            if isinstance(t, GenericType) and t.name == ARC:
                arg = t.args[0] if t.args else None
                if isinstance(arg, RefType) and arg.ref_name == REQUEST:
                    has_response_handler = True
                # other Arc arguments carry the execution context
                continue
            if isinstance(t, GenericType) and t.name == APP_OBJECT:
                app_object = self._app_object(t, f"{module.name}.{func.name}")
            elif param.name == "params":
                params = param
        if app_object is not None:
            has_response_handler = False
        return FunctionInfo(params, has_response_handler, app_object)

    # App objects

    def _required_enum(self, t: Optional[ApiType], role: str, context: str) -> Tuple[RefType, EnumOfTypesType]:
        if not isinstance(t, RefType) or t.target is None:
            raise SchemaError(f"{role} type of an AppObject in {context} must be a registered type", context)
        if not isinstance(t.target.type, EnumOfTypesType):
            raise SchemaError(
                f"{role} type of an AppObject must be an enum: {t.ref_name}", t.ref_name
            )
        return t, t.target.type

    def _app_object(self, source: GenericType, context: str) -> Module:
        args = list(source.args) + [None, None]
        params_ref, params_enum = self._required_enum(args[0], "Params", context)
        result_ref, result_enum = self._required_enum(args[1], "Result", context)

        name = params_ref.short_name
        if name.startswith(PARAMS_PREFIX) and len(name) > len(PARAMS_PREFIX):
            name = name[len(PARAMS_PREFIX):]
        if name in self._app_objects:
            return self._app_objects[name]

        functions = []
        for params_variant in params_enum.variants:
            result_variant = result_enum.variant(params_variant.name)
            functions.append(Function(
                name=pascal_to_snake(params_variant.name),
                params=self._app_params(params_variant),
                result=self._app_result(result_variant),
                summary=params_variant.summary,
                description=params_variant.description,
            ))

        params_type = params_ref.target
        app_object = Module(
            name=name,
            types=(),
            functions=tuple(functions),
            summary=params_type.summary,
            description=params_type.description,
        )
        self._app_objects[name] = app_object
        self._app_object_types[name] = (params_type, result_ref.target)
        logger.debug("Synthesized app object %s with %d functions", name, len(functions))
        return app_object

    @staticmethod
    def _copy_ref(t: ApiType) -> ApiType:
        if isinstance(t, RefType) and t.target is not None:
            ref = RefType(t.ref_name)
            ref.bind(t.target)
            return ref
        return t

    def _app_params(self, variant: Field) -> Tuple[Field, ...]:
        if not variant_has_payload(variant):
            return ()
        return (Field(name="params", type=self._copy_ref(variant.type)),)

    def _app_result(self, variant: Optional[Field]) -> Optional[ApiType]:
        if variant is None:
            return None
        if not variant_has_payload(variant):
            return NoneType()
        return self._copy_ref(variant.type)


def load_document(source: Union[str, bytes, Dict[str, Any]]) -> Dict[str, Any]:
    """Accept raw JSON text or an already-parsed document."""
    if isinstance(source, (str, bytes)):
        try:
            return json.loads(source)
        except json.JSONDecodeError as e:
            raise SchemaError(f"Schema document is not valid JSON: {e}") from e
    return source


def resolve(source: Union[str, bytes, Dict[str, Any], Schema]) -> ResolvedSchema:
    """
    Parse (when needed) and resolve a schema document.

    Args:
        source: Raw JSON text, a parsed document, or an unresolved Schema

    Returns:
        ResolvedSchema: The linked, read-only graph

    Raises:
        SchemaError: On any malformed input or failed resolution
    """
    schema = source if isinstance(source, Schema) else parse_schema(load_document(source))
    return SchemaResolver(schema).resolve()


def validate_schema(resolved: ResolvedSchema) -> List[str]:
    """
    Check a resolved schema for structural issues that do not abort a run.

    Args:
        resolved: Schema to validate

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []

    for module in resolved.modules:
        if not module.functions:
            warnings.append(f"Module '{module.name}' has no functions")
        for func in module.functions:
            if not func.summary:
                warnings.append(f"Function '{module.name}.{func.name}' has no summary")

    for name, modules in resolved.collisions.items():
        warnings.append(f"Type name '{name}' is defined in modules: {', '.join(modules)}")

    return warnings
