"""Jinja2 template rendering for generator files.

Provides the TemplateRenderer class which renders generator templates (file
contents, destination paths, dependency fields) against a
:class:`~scaffolt.models.TemplateContext`.  Every renderer owns its own
Jinja2 environment, so helpers registered by a generator's ``helpers.py``
live only as long as the scaffold run that loaded them.

Built-in helpers::

    {% filter camelCase %}{{ name }}-service{% endfilter %}   -> userService
    {{ name | pascalCase }}                                  -> UserService
    {{ through(value="name") }}                              -> {{name}}
    {{ var("$license") }}                                    -> value of the "$license" variable

A back-slash before an opening brace (``\\{{name}}``) is emitted literally
instead of being substituted.
"""

from __future__ import annotations

import hashlib
import importlib.util
import re
from pathlib import Path
from typing import Any, Callable, Mapping

from jinja2 import Environment, pass_context
from jinja2.runtime import Context

from .errors import InvalidGeneratorError, RenderFailureError
from .models import TemplateContext


# Stands in for an escaped brace while Jinja2 compiles the template.
_ESCAPE_SENTINEL = "\u241bSCAFFOLTBRACE\u241b"
_ESCAPED_BRACE = "\\{"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders generator templates with a per-session helper registry.

    Templates are plain strings (read from the generator directory by the
    caller).  Helpers are Jinja2 filters, so they apply either inline
    (``{{ name | camelCase }}``) or to a whole block via
    ``{% filter camelCase %}...{% endfilter %}``.
    """

    def __init__(self) -> None:
        self.env = Environment(
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._loaded_helpers: set[Path] = set()

        self.register_helper("camelCase", camel_case)
        self.register_helper("pascalCase", pascal_case)
        self.register_global("through", through)
        self.register_global("var", _lookup_variable)

    # -- Helper registry ---------------------------------------------------

    def register_helper(self, name: str, func: Callable[..., Any]) -> None:
        """Register a filter usable as ``{{ x | name }}`` or ``{% filter name %}``."""
        self.env.filters[name] = func

    def register_global(self, name: str, value: Any) -> None:
        """Register a function or constant callable as ``{{ name(...) }}``."""
        self.env.globals[name] = value

    @property
    def helpers(self) -> dict[str, Callable[..., Any]]:
        """Filters currently registered on this renderer."""
        return dict(self.env.filters)

    def load_helpers(self, helpers_path: str | Path) -> None:
        """Import a generator's ``helpers.py`` and let it register helpers.

        The module must define ``register(renderer)``; it is called with this
        renderer.  A given file is only loaded once per renderer.

        Raises:
            InvalidGeneratorError: If the module fails to import or has no
                callable ``register``.
        """
        path = Path(helpers_path).resolve()
        if path in self._loaded_helpers:
            return

        generator_type = path.parent.name
        digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:12]
        spec = importlib.util.spec_from_file_location(f"scaffolt_helpers_{digest}", path)
        if spec is None or spec.loader is None:
            raise InvalidGeneratorError(generator_type, f"cannot import helpers from {path}")

        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            raise InvalidGeneratorError(generator_type, f"helpers.py failed to import: {exc}") from exc

        register = getattr(module, "register", None)
        if not callable(register):
            raise InvalidGeneratorError(generator_type, "helpers.py must define register(renderer)")
        register(self)
        self._loaded_helpers.add(path)

    # -- Rendering ---------------------------------------------------------

    def render_string(
        self,
        template: str | None,
        context: TemplateContext | Mapping[str, Any],
    ) -> str:
        """Render an inline template string with the provided context.

        Args:
            template: Template source.  ``None`` or ``""`` renders as ``""``.
            context: A ``TemplateContext`` or a plain variable mapping.

        Returns:
            The rendered text.

        Raises:
            RenderFailureError: If the template has a syntax error or fails
                while rendering.
        """
        if not template:
            return ""
        if isinstance(context, TemplateContext):
            variables = context.as_template_vars()
        else:
            variables = dict(context)

        source = template.replace(_ESCAPED_BRACE, _ESCAPE_SENTINEL)
        try:
            rendered = self.env.from_string(source).render(variables)
        except Exception as exc:
            raise RenderFailureError(f"Template rendering failed: {exc}") from exc
        return rendered.replace(_ESCAPE_SENTINEL, _ESCAPED_BRACE)


# ---------------------------------------------------------------------------
# Built-in helpers
# ---------------------------------------------------------------------------

_SEPARATOR_PATTERN = re.compile(r"[-_]([A-Za-z])")


def camel_case(value: Any) -> str:
    """Convert ``my-module_name`` to ``myModuleName``."""
    text = _SEPARATOR_PATTERN.sub(lambda m: m.group(1).upper(), str(value))
    if not text:
        return ""
    return text[0].lower() + text[1:]


def pascal_case(value: Any) -> str:
    """Convert ``my-module_name`` to ``MyModuleName``."""
    text = camel_case(value)
    if not text:
        return ""
    return text[0].upper() + text[1:]


def through(value: Any = "") -> str:
    """Emit ``{{value}}`` verbatim, for templates that generate templates."""
    return "{{" + str(value) + "}}"


@pass_context
def _lookup_variable(context: Context, key: str, default: Any = "") -> Any:
    """Look up a variable whose name is not a valid identifier (``$key``)."""
    return context.get(key, default)
