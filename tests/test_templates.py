"""Tests for the Jinja2 template renderer.

Covers:
- Variable substitution from a TemplateContext and from plain mappings
- Escaped braces
- camelCase / pascalCase helpers, inline and as block filters
- through() helper
- var() lookup for prefixed variables
- Render failures
- helpers.py loading and per-renderer isolation
"""

from __future__ import annotations

from pathlib import Path

import pytest

from scaffolt.errors import InvalidGeneratorError, RenderFailureError
from scaffolt.models import TemplateContext
from scaffolt.templates import TemplateRenderer, camel_case, pascal_case, through


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Substitution
# ---------------------------------------------------------------------------


class TestRenderString:
    def test_context_variables(self, renderer, context):
        rendered = renderer.render_string(
            "{{name}} {{moduleName}} {{pluralName}} {{type}}", context
        )
        assert rendered == "user shop users controller"

    def test_plain_mapping(self, renderer):
        assert renderer.render_string("hi {{ who }}", {"who": "there"}) == "hi there"

    def test_empty_template(self, renderer, context):
        assert renderer.render_string("", context) == ""
        assert renderer.render_string(None, context) == ""

    def test_undefined_renders_empty(self, renderer, context):
        assert renderer.render_string("[{{ missing }}]", context) == "[]"

    def test_parent_path_omitted_when_unset(self, renderer, context):
        assert renderer.render_string("{{ parentPath }}/x", context) == "/x"

    def test_keeps_trailing_newline(self, renderer, context):
        assert renderer.render_string("{{ name }}\n", context) == "user\n"

    def test_extra_variables(self, renderer):
        ctx = TemplateContext(name="post", extra={"author": "Jane"})
        assert renderer.render_string("{{ name }} by {{ author }}", ctx) == "post by Jane"


class TestEscapes:
    def test_escaped_brace_is_literal(self, renderer, context):
        assert renderer.render_string("a\\{b}", context) == "a\\{b}"

    def test_escaped_substitution_is_not_rendered(self, renderer, context):
        rendered = renderer.render_string("\\{{name}} = {{name}}", context)
        assert rendered == "\\{{name}} = user"

    def test_every_escape_is_restored(self, renderer, context):
        assert renderer.render_string("\\{x} \\{y}", context) == "\\{x} \\{y}"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestCaseHelpers:
    def test_camel_case(self):
        assert camel_case("my-module_name") == "myModuleName"

    def test_pascal_case(self):
        assert pascal_case("my-module_name") == "MyModuleName"

    def test_camel_case_lowercases_first_char(self):
        assert camel_case("User-profile") == "userProfile"

    def test_empty(self):
        assert camel_case("") == ""
        assert pascal_case("") == ""

    def test_block_filter_uses_rendered_text(self, renderer):
        template = "{% filter camelCase %}{{ a }}-{{ b }}{% endfilter %}"
        assert renderer.render_string(template, {"a": "my", "b": "module_name"}) == "myModuleName"

    def test_inline_filter(self, renderer):
        assert renderer.render_string("{{ n | pascalCase }}", {"n": "my-module_name"}) == "MyModuleName"


class TestThrough:
    def test_through_function(self):
        assert through("name") == "{{name}}"

    def test_through_in_template(self, renderer, context):
        rendered = renderer.render_string('{{ through(value="pluralName") }} / {{ name }}', context)
        assert rendered == "{{pluralName}} / user"


class TestVarLookup:
    def test_prefixed_variable(self, renderer):
        ctx = TemplateContext(name="x", extra={"$license": "MIT"})
        assert renderer.render_string('{{ var("$license") }}', ctx) == "MIT"

    def test_missing_uses_default(self, renderer, context):
        assert renderer.render_string('{{ var("$nope", "none") }}', context) == "none"


class TestRenderFailure:
    def test_syntax_error_raises(self, renderer, context):
        with pytest.raises(RenderFailureError):
            renderer.render_string("{% if %}", context)

    def test_unknown_filter_raises(self, renderer, context):
        with pytest.raises(RenderFailureError):
            renderer.render_string("{{ name | shout }}", context)

    @pytest.mark.parametrize("template", ["{{ name + 1 }}", "{{ 1 / 0 }}"])
    def test_runtime_error_raises(self, renderer, context, template: str):
        with pytest.raises(RenderFailureError):
            renderer.render_string(template, context)

    def test_failing_helper_raises(self, renderer, context):
        def explode(value):
            raise LookupError(value)

        renderer.register_helper("explode", explode)
        with pytest.raises(RenderFailureError, match="user"):
            renderer.render_string("{{ name | explode }}", context)


# ---------------------------------------------------------------------------
# helpers.py loading
# ---------------------------------------------------------------------------


class TestLoadHelpers:
    def _write(self, directory: Path, body: str) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / "helpers.py"
        path.write_text(body, encoding="utf-8")
        return path

    def test_registers_custom_helper(self, renderer, tmp_path: Path):
        path = self._write(
            tmp_path / "shout",
            "def register(renderer):\n"
            "    renderer.register_helper('shout', lambda text: str(text).upper() + '!')\n",
        )
        renderer.load_helpers(path)
        assert renderer.render_string("{{ 'hey' | shout }}", {}) == "HEY!"
        assert "shout" in renderer.helpers

    def test_helpers_do_not_leak_between_renderers(self, tmp_path: Path):
        path = self._write(
            tmp_path / "shout",
            "def register(renderer):\n"
            "    renderer.register_helper('shout', lambda text: str(text).upper())\n",
        )
        first = TemplateRenderer()
        first.load_helpers(path)
        second = TemplateRenderer()
        assert "shout" in first.helpers
        assert "shout" not in second.helpers

    def test_loaded_once(self, renderer, tmp_path: Path):
        path = self._write(
            tmp_path / "counter",
            "CALLS = []\n"
            "def register(renderer):\n"
            "    CALLS.append(1)\n"
            "    renderer.register_global('calls', len(CALLS))\n",
        )
        renderer.load_helpers(path)
        renderer.load_helpers(path)
        assert renderer.render_string("{{ calls }}", {}) == "1"

    def test_missing_register(self, renderer, tmp_path: Path):
        path = self._write(tmp_path / "broken", "VALUE = 1\n")
        with pytest.raises(InvalidGeneratorError, match="register"):
            renderer.load_helpers(path)

    def test_import_error(self, renderer, tmp_path: Path):
        path = self._write(tmp_path / "broken", "raise RuntimeError('boom')\n")
        with pytest.raises(InvalidGeneratorError, match="boom") as exc_info:
            renderer.load_helpers(path)
        assert exc_info.value.generator_type == "broken"
