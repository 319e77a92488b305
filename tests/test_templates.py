"""Tests for the Jinja2 template engine wrapper."""

import pytest

from apigen.codegen.core.generator import generate_code
from apigen.codegen.core.config import load_config
from apigen.codegen.core.templates import (
    BUILTIN_TEMPLATES,
    TemplateEngine,
    TemplateError,
    create_template_engine,
)
from apigen.codegen.languages.typescript import TypeScriptGenerator


class TestTemplateEngine:

    def test_indent_filter_skips_blank_lines(self):
        engine = TemplateEngine(templates={"block": "{{ text | indent(2) }}"})
        assert engine.render_template("block", {"text": "a\n\nb"}) == "  a\n\n  b"

    def test_missing_variable_is_an_error(self):
        engine = TemplateEngine(templates={"greeting": "Hello {{ missing }}"})
        with pytest.raises(TemplateError, match="Failed to render template greeting"):
            engine.render_template("greeting", {})

    def test_unknown_template(self):
        engine = create_template_engine()
        with pytest.raises(TemplateError, match="nope"):
            engine.render_template("nope", {})

    def test_builtin_templates(self):
        assert sorted(BUILTIN_TEMPLATES) == [
            "md/index",
            "md/module",
            "ts/dispatcher",
            "ts/header",
            "ts/module",
        ]


class TestTemplateOverrides:
    """A template directory replaces built-ins by name."""

    def test_directory_override(self, tmp_path):
        (tmp_path / "md").mkdir()
        (tmp_path / "md" / "index").write_text("# Custom {{ modules | length }}\n", encoding="utf-8")
        engine = create_template_engine(tmp_path)
        assert engine.render_template("md/index", {"modules": [1, 2]}) == "# Custom 2\n"
        assert "# Module" in engine.render_template("md/module", {
            "name": "m",
            "summary": None,
            "description": None,
            "function_links": [],
            "type_links": [],
            "function_sections": [],
            "type_sections": [],
        })

    def test_renderer_uses_template_dir(self, tmp_path, foo_schema):
        (tmp_path / "ts").mkdir()
        (tmp_path / "ts" / "header").write_text("// custom header\n", encoding="utf-8")
        config = load_config("ts", {"custom": {"template_dir": str(tmp_path)}})
        result = generate_code(TypeScriptGenerator(foo_schema, config))
        assert result.files["modules.ts"].startswith("// custom header\n")
