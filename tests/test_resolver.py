"""Tests for linking, reference resolution and app-object synthesis."""

import logging

import pytest

from apigen.codegen.core.resolver import (
    ResolvedSchema,
    hoisted_variant_name,
    resolve,
    validate_schema,
)
from apigen.codegen.core.schema import (
    EnumOfTypesType,
    NoneType,
    RefType,
    SchemaError,
    StructType,
    parse_schema,
)


def two_module_document(first_ref="Item", second_ref="Item"):
    """Two modules that both define ``Item`` and reference it from a struct."""
    def module(name, ref_name):
        return {
            "name": name,
            "types": [
                {"name": "Item", "type": "Struct", "struct_fields": []},
                {
                    "name": f"Holder{name.title()}",
                    "type": "Struct",
                    "struct_fields": [{"name": "item", "type": "Ref", "ref_name": ref_name}],
                },
            ],
            "functions": [],
        }

    return {"version": "1", "modules": [module("alpha", first_ref), module("beta", second_ref)]}


class TestHoisting:
    """Inline variant payloads become named module types."""

    def test_inline_struct_is_hoisted(self, shape_schema):
        hoisted = shape_schema.find_type("geometry.ShapeCircleVariant")
        assert hoisted is not None
        assert hoisted.is_internal
        assert [f.name for f in hoisted.type.fields] == ["radius"]
        assert hoisted.summary == "A circle"

    def test_variant_points_at_hoisted_type(self, shape_schema):
        shape = shape_schema.find_type("geometry.Shape")
        circle = shape.type.variant("Circle")
        assert isinstance(circle.type, RefType)
        assert circle.type.ref_name == "geometry.ShapeCircleVariant"
        assert circle.type.target is shape_schema.find_type("geometry.ShapeCircleVariant")

    def test_none_variant_untouched(self, shape_schema):
        shape = shape_schema.find_type("geometry.Shape")
        assert isinstance(shape.type.variant("Point").type, NoneType)

    def test_hoisted_type_precedes_enum(self, shape_schema):
        names = [t.name for t in shape_schema.modules[0].types]
        assert names.index("ShapeCircleVariant") < names.index("Shape")

    def test_hoisted_name(self):
        assert hoisted_variant_name("Shape", "Circle") == "ShapeCircleVariant"


class TestReferenceResolution:
    """Qualification and binding of refs."""

    def test_refs_are_qualified_and_bound(self, shape_schema):
        params = shape_schema.find_type("geometry.ParamsOfArea")
        shape_ref = params.type.fields[0].type
        assert shape_ref.ref_name == "geometry.Shape"
        assert shape_ref.target is shape_schema.find_type("geometry.Shape")

    def test_client_result_is_unwrapped(self, shape_schema):
        area = shape_schema.modules[0].get_function("area")
        assert isinstance(area.result, RefType)
        assert area.result.ref_name == "geometry.ResultOfArea"

    def test_dynamic_refs_stay_unbound(self):
        document = {
            "version": "1",
            "modules": [{
                "name": "m",
                "types": [{"name": "Payload", "type": "Ref", "ref_name": "Value"}],
                "functions": [],
            }],
        }
        payload = resolve(document).find_type("m.Payload")
        assert payload.type.ref_name == "Value"
        assert payload.type.target is None

    def test_cross_module_reference(self):
        document = {
            "version": "1",
            "modules": [
                {"name": "abi", "types": [{"name": "Abi", "type": "String"}], "functions": []},
                {
                    "name": "processing",
                    "types": [{
                        "name": "ParamsOfProcess",
                        "type": "Struct",
                        "struct_fields": [{"name": "abi", "type": "Ref", "ref_name": "Abi"}],
                    }],
                    "functions": [],
                },
            ],
        }
        schema = resolve(document)
        field = schema.find_type("processing.ParamsOfProcess").type.fields[0]
        assert field.type.ref_name == "abi.Abi"

    def test_unresolved_reference(self, missing_ref_document):
        with pytest.raises(SchemaError) as exc_info:
            resolve(missing_ref_document)
        assert exc_info.value.name == "Missing"
        assert "Missing" in str(exc_info.value)
        assert "broken.Holder.inner" in str(exc_info.value)

    def test_duplicate_type(self):
        document = {
            "version": "1",
            "modules": [{
                "name": "m",
                "types": [{"name": "T", "type": "String"}, {"name": "T", "type": "Boolean"}],
                "functions": [],
            }],
        }
        with pytest.raises(SchemaError, match="Duplicate type definition: m.T"):
            resolve(document)

    def test_accepts_json_text(self, foo_document):
        import json

        schema = resolve(json.dumps(foo_document))
        assert schema.version == "1.0.0"

    def test_invalid_json_text(self):
        with pytest.raises(SchemaError, match="not valid JSON"):
            resolve("{not json")

    def test_accepts_parsed_schema(self, foo_document):
        schema = resolve(parse_schema(foo_document))
        assert [m.name for m in schema.modules] == ["foo"]


class TestNameCollisions:
    """Same bare name defined by several modules."""

    def test_owner_scope_wins(self):
        schema = resolve(two_module_document())
        alpha = schema.find_type("alpha.HolderAlpha").type.fields[0].type
        beta = schema.find_type("beta.HolderBeta").type.fields[0].type
        assert alpha.ref_name == "alpha.Item"
        assert beta.ref_name == "beta.Item"
        assert schema.collisions == {"Item": ("alpha", "beta")}

    def test_collisions_are_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="apigen"):
            resolve(two_module_document())
        assert "defined in several modules" in caplog.text

    def test_ambiguous_reference_from_third_module(self):
        document = two_module_document()
        document["modules"].append({
            "name": "gamma",
            "types": [{
                "name": "Wrapper",
                "type": "Struct",
                "struct_fields": [{"name": "item", "type": "Ref", "ref_name": "Item"}],
            }],
            "functions": [],
        })
        with pytest.raises(SchemaError, match="Ambiguous reference 'Item'"):
            resolve(document)

    def test_qualified_reference_disambiguates(self):
        schema = resolve(two_module_document(first_ref="beta.Item"))
        alpha = schema.find_type("alpha.HolderAlpha").type.fields[0].type
        assert alpha.ref_name == "beta.Item"

    def test_validation_reports_collision(self):
        warnings = validate_schema(resolve(two_module_document()))
        assert "Type name 'Item' is defined in modules: alpha, beta" in warnings


class TestOwnership:
    """Side tables replace back-pointers."""

    def test_module_of(self, shape_schema):
        module = shape_schema.modules[0]
        area = module.get_function("area")
        assert shape_schema.module_of(area) is module
        assert shape_schema.module_of(module.get_type("Shape")) is module
        assert shape_schema.qualified_name(area) == "geometry.area"

    def test_module_of_foreign_entity(self, shape_schema, foo_schema):
        foreign = foo_schema.modules[0].get_function("bar")
        with pytest.raises(SchemaError, match="not part of this schema"):
            shape_schema.module_of(foreign)

    def test_resolution_is_deterministic(self, shape_document):
        assert resolve(shape_document) == resolve(shape_document)


class TestFunctionInfo:
    """Call shapes derived from parameters."""

    def test_plain_params(self, foo_schema):
        info = foo_schema.function_info(foo_schema.modules[0].get_function("bar"))
        assert info.params.name == "params"
        assert isinstance(info.params.type, StructType)
        assert not info.has_response_handler
        assert info.app_object is None

    def test_response_handler(self, subscribe_schema):
        wait_for = subscribe_schema.modules[0].get_function("wait_for")
        info = subscribe_schema.function_info(wait_for)
        assert info.has_response_handler
        assert info.app_object is None

    def test_app_object_suppresses_handler(self, subscribe_schema):
        subscribe = subscribe_schema.modules[0].get_function("subscribe")
        info = subscribe_schema.function_info(subscribe)
        assert not info.has_response_handler
        assert info.app_object is subscribe_schema.app_objects["Subscribe"]
        assert info.params.type.ref_name == "net.ParamsOfQuery"


class TestAppObjects:
    """Pseudo-modules synthesized from AppObject<Params, Result>."""

    def test_single_function_synthesized(self, subscribe_schema):
        app_object = subscribe_schema.app_objects["Subscribe"]
        assert app_object.summary == "Subscription callbacks"
        assert [f.name for f in app_object.functions] == ["ok"]

    def test_function_shape(self, subscribe_schema):
        ok = subscribe_schema.app_objects["Subscribe"].get_function("ok")
        assert len(ok.params) == 1
        assert ok.params[0].name == "params"
        assert ok.params[0].type.ref_name == "net.ParamsOfSubscribeOkVariant"
        assert isinstance(ok.result, NoneType)
        assert ok.summary == "Delivers a result"

    def test_app_object_functions_are_owned(self, subscribe_schema):
        app_object = subscribe_schema.app_objects["Subscribe"]
        ok = app_object.get_function("ok")
        assert subscribe_schema.module_of(ok) is app_object
        assert subscribe_schema.function_info(ok).params is ok.params[0]

    def test_source_enums(self, subscribe_schema):
        params_type, result_type = subscribe_schema.app_object_types("Subscribe")
        assert params_type.name == "ParamsOfSubscribe"
        assert result_type.name == "ResultOfSubscribe"
        assert isinstance(params_type.type, EnumOfTypesType)
        with pytest.raises(SchemaError, match="Unknown app object"):
            subscribe_schema.app_object_types("Nope")

    def test_missing_result_variant_means_no_result(self, subscribe_document):
        net = subscribe_document["modules"][0]
        net["types"][0]["enum_types"].append({"name": "Closed", "type": "None"})
        schema = resolve(subscribe_document)
        app_object = schema.app_objects["Subscribe"]
        closed = app_object.get_function("closed")
        assert closed.result is None
        assert closed.params == ()

    def test_result_payload_is_kept(self, subscribe_document):
        result_enum = subscribe_document["modules"][0]["types"][1]
        result_enum["enum_types"][0] = {
            "name": "Ok",
            "type": "Struct",
            "struct_fields": [{"name": "accepted", "type": "Boolean"}],
        }
        schema = resolve(subscribe_document)
        ok = schema.app_objects["Subscribe"].get_function("ok")
        assert ok.result.ref_name == "net.ResultOfSubscribeOkVariant"
        assert ok.result.target is schema.find_type("net.ResultOfSubscribeOkVariant")

    def test_params_must_be_enum(self, subscribe_document):
        subscribe = subscribe_document["modules"][0]["functions"][0]
        subscribe["params"][2]["generic_args"][0] = {"type": "Ref", "ref_name": "ParamsOfQuery"}
        with pytest.raises(SchemaError, match="must be an enum: net.ParamsOfQuery"):
            resolve(subscribe_document)


class TestValidateSchema:

    def test_warnings(self, missing_ref_document):
        missing_ref_document["modules"][0]["types"][0]["struct_fields"] = []
        warnings = validate_schema(resolve(missing_ref_document))
        assert "Module 'broken' has no functions" in warnings

    def test_function_without_summary(self, foo_document):
        del foo_document["modules"][0]["functions"][0]["summary"]
        warnings = validate_schema(resolve(foo_document))
        assert "Function 'foo.bar' has no summary" in warnings

    def test_clean_schema(self, shape_schema):
        assert validate_schema(shape_schema) == []

    def test_resolved_type(self, shape_schema):
        assert isinstance(shape_schema, ResolvedSchema)
        assert shape_schema.version == "1.0.0"
