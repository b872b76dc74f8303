"""scaffolt -- generator-driven file scaffolding.

A *generator* is a directory holding a ``generator.json`` recipe, the
templates it renders, and optionally a ``helpers.py``.  Scaffolding a
generator renders its templates (and those of every generator it depends
on) against a template context and writes, appends or reverts the results.

Quick usage::

    import asyncio
    from scaffolt import Scaffolt, ScaffoldConfig

    app = Scaffolt(ScaffoldConfig(generators_path="generators"))
    result = asyncio.run(app.scaffold("controller", "user"))
"""

from scaffolt.config import ScaffoldConfig
from scaffolt.errors import (
    ConfigNotFoundError,
    CyclicDependencyError,
    InvalidGeneratorError,
    MissingTargetError,
    RenderFailureError,
    ScaffoldError,
    ScaffoltError,
    UnknownGeneratorError,
)
from scaffolt.loader import bind_generator, load_generators
from scaffolt.models import (
    FileMethod,
    FileOutcome,
    FileSpec,
    GeneratorDefinition,
    OutcomeStatus,
    ScaffoldResult,
    TemplateContext,
)
from scaffolt.pipeline import Scaffolt, build_context
from scaffolt.resolver import resolve_dependencies
from scaffolt.scaffolder import FileScaffolder
from scaffolt.templates import TemplateRenderer

__all__ = [
    "ConfigNotFoundError",
    "CyclicDependencyError",
    "FileMethod",
    "FileOutcome",
    "FileScaffolder",
    "FileSpec",
    "GeneratorDefinition",
    "InvalidGeneratorError",
    "MissingTargetError",
    "OutcomeStatus",
    "RenderFailureError",
    "ScaffoldConfig",
    "ScaffoldError",
    "ScaffoldResult",
    "Scaffolt",
    "ScaffoltError",
    "TemplateContext",
    "TemplateRenderer",
    "UnknownGeneratorError",
    "bind_generator",
    "build_context",
    "load_generators",
    "resolve_dependencies",
]
