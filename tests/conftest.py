"""Shared pytest fixtures for the scaffolt test suite.

Provides reusable fixtures for:
- Temporary project roots with a ``generators/`` directory
- A factory that writes generator directories (config, templates, helpers)
- A sample generator tree (controller -> model -> base, plus a routes appender)
- A default template context
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any, Callable

import pytest

from scaffolt.config import ScaffoldConfig
from scaffolt.models import TemplateContext
from scaffolt.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Temporary project directory (auto-cleanup)."""
    root = tmp_path / "project"
    root.mkdir()
    yield root


@pytest.fixture
def generators_dir(project_root: Path) -> Path:
    """Empty ``generators/`` directory inside the project root."""
    path = project_root / "generators"
    path.mkdir()
    return path


# ---------------------------------------------------------------------------
# Generator factory
# ---------------------------------------------------------------------------

MakeGenerator = Callable[..., Path]


@pytest.fixture
def make_generator(generators_dir: Path) -> MakeGenerator:
    """Return a function that writes one generator directory.

    Usage::

        make_generator(
            "model",
            files=[{"from": "model.py.j2", "to": "app/models/{{name}}.py"}],
            templates={"model.py.j2": "class {{ name | pascalCase }}: ...\\n"},
        )
    """

    def _make(
        generator_type: str,
        *,
        files: list[dict[str, Any]] | None = None,
        dependencies: list[dict[str, Any]] | None = None,
        templates: dict[str, str] | None = None,
        helpers: str | None = None,
        **meta: Any,
    ) -> Path:
        directory = generators_dir / generator_type
        directory.mkdir(parents=True, exist_ok=True)

        config: dict[str, Any] = {**meta, "files": files or []}
        if dependencies is not None:
            config["dependencies"] = dependencies
        (directory / "generator.json").write_text(json.dumps(config, indent=2), encoding="utf-8")

        for filename, content in (templates or {}).items():
            template_path = directory / filename
            template_path.parent.mkdir(parents=True, exist_ok=True)
            template_path.write_text(content, encoding="utf-8")

        if helpers is not None:
            (directory / "helpers.py").write_text(textwrap.dedent(helpers), encoding="utf-8")
        return directory

    return _make


@pytest.fixture
def sample_generators(make_generator: MakeGenerator, generators_dir: Path) -> Path:
    """A small generator tree: ``controller`` -> ``model`` -> ``base``.

    ``controller`` also appends a line to ``app/routes.py`` through the
    ``route`` generator.
    """
    make_generator(
        "base",
        name="Base module",
        description="Package marker for the module",
        files=[{"from": "init.py.j2", "to": "app/{{moduleName}}/__init__.py"}],
        templates={"init.py.j2": '"""{{ moduleName }} package."""\n'},
    )
    make_generator(
        "model",
        name="Model",
        description="Data model class",
        files=[{"from": "model.py.j2", "to": "app/{{moduleName}}/models/{{name}}.py"}],
        dependencies=[{"type": "base"}],
        templates={
            "model.py.j2": (
                "class {{ name | pascalCase }}:\n"
                '    table = "{{ pluralName }}"\n'
            ),
        },
    )
    make_generator(
        "route",
        description="Registers a route",
        files=[{"from": "route.py.j2", "to": "app/routes.py", "method": "append"}],
        templates={"route.py.j2": 'ROUTES.append("/{{ pluralName }}")\n'},
    )
    make_generator(
        "controller",
        name="Controller",
        description="Request handlers plus model",
        files=[
            {
                "from": "controller.py.j2",
                "to": "app/{{moduleName}}/controllers/{{name}}_controller.py",
            },
        ],
        dependencies=[{"type": "model"}, {"type": "route"}],
        templates={
            "controller.py.j2": (
                "from app.{{ moduleName }}.models.{{ name }} import {{ name | pascalCase }}\n"
                "\n"
                "\n"
                "class {% filter pascalCase %}{{ name }}-controller{% endfilter %}:\n"
                "    model = {{ name | pascalCase }}\n"
            ),
        },
    )
    return generators_dir


# ---------------------------------------------------------------------------
# Context & renderer
# ---------------------------------------------------------------------------

@pytest.fixture
def context() -> TemplateContext:
    """Template context for a ``user`` in the ``shop`` module."""
    return TemplateContext(
        name="user",
        module_name="shop",
        plural_name="users",
        type="controller",
    )


@pytest.fixture
def renderer() -> TemplateRenderer:
    """A fresh renderer with only the built-in helpers."""
    return TemplateRenderer()


@pytest.fixture
def config(project_root: Path, generators_dir: Path) -> ScaffoldConfig:
    """Config pointing at the temporary project root."""
    return ScaffoldConfig(
        generators_path=Path("generators"),
        project_root=project_root,
    )
