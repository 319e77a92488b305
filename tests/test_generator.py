"""End-to-end generation through ``generate_code`` and ``generate_from_schema``."""

import pytest

from apigen.codegen import (
    GenerationResult,
    SchemaError,
    UsageError,
    generate_from_schema,
)
from apigen.codegen.core.generator import Renderer, generate_code
from apigen.codegen.core.resolver import resolve
from apigen.codegen.languages.typescript import TypeScriptGenerator


class TestGenerateCode:

    def test_typescript_result(self, foo_schema):
        result = generate_code(TypeScriptGenerator(foo_schema))
        assert isinstance(result, GenerationResult)
        assert result.file_names == ["modules.ts"]
        code = result.files["modules.ts"]
        assert code.startswith('import { ResponseHandler } from "./bin";')
        assert "return this.client.request('foo.bar', params);" in code
        assert code.endswith("}\n")
        assert "\n\n\n\n" not in code

    def test_metadata(self, subscribe_schema):
        result = generate_code(TypeScriptGenerator(subscribe_schema))
        assert result.metadata == {
            "language": "typescript",
            "file_extension": ".ts",
            "version": "1.0.0",
            "module_count": 1,
            "function_count": 2,
            "type_count": 6,
            "app_object_count": 1,
        }

    def test_warnings_are_collected(self, foo_document):
        del foo_document["modules"][0]["functions"][0]["summary"]
        result = generate_code(TypeScriptGenerator(resolve(foo_document)))
        assert result.warnings == ["Function 'foo.bar' has no summary"]

    def test_format_code(self, foo_schema):
        gen = TypeScriptGenerator(foo_schema)
        assert gen.format_code("\n\na  \n\n\n\n\nb\n\n") == "a\n\n\nb\n"

    def test_renderer_is_abstract(self, foo_schema):
        with pytest.raises(TypeError):
            Renderer(foo_schema)


class TestGenerateFromSchema:
    """Worked examples from raw documents to files."""

    def test_function_binding_and_docs(self, foo_document):
        ts = generate_from_schema(foo_document, "ts")
        assert "this.client.request('foo.bar', params)" in ts.files["modules.ts"]

        docs = generate_from_schema(foo_document, "docs")
        page = docs.files["mod_foo.md"]
        assert "## bar\n" in page
        assert "### Parameters\n\n- `x`: _number_" in page

    def test_tagged_union(self, shape_document):
        code = generate_from_schema(shape_document, "ts").files["modules.ts"]
        assert "export type Shape = {\n    type: 'Circle',\n    radius: number\n} | 'Point';" in code
        assert "export function shapeCircle(radius: number): Shape {" in code
        assert "export const shapePoint: Shape = 'Point';" in code

        page = generate_from_schema(shape_document, "docs").files["mod_geometry.md"]
        assert page.count("When type is") == 2

    def test_app_object(self, subscribe_document):
        code = generate_from_schema(subscribe_document, "ts").files["modules.ts"]
        assert "ok(params: ParamsOfSubscribeOkVariant): Promise<void>," in code
        assert code.count("ok(params: ParamsOfSubscribeOkVariant)") == 1

    def test_missing_reference_produces_nothing(self, missing_ref_document):
        with pytest.raises(SchemaError) as exc_info:
            generate_from_schema(missing_ref_document, "ts")
        assert exc_info.value.name == "Missing"

    def test_unknown_backend(self, foo_document):
        with pytest.raises(UsageError, match="Unsupported backend: rust"):
            generate_from_schema(foo_document, "rust")

    def test_aliases(self, foo_document):
        assert generate_from_schema(foo_document, "TypeScript").file_names == ["modules.ts"]
        assert "modules.md" in generate_from_schema(foo_document, "markdown").files

    def test_resolved_schema_is_reused(self, foo_schema):
        result = generate_from_schema(foo_schema, "docs", {"add_comments": True})
        assert result.metadata["language"] == "markdown"

    def test_generation_is_deterministic(self, shape_document):
        first = generate_from_schema(shape_document, "docs").files
        second = generate_from_schema(shape_document, "docs").files
        assert first == second
