"""Generator discovery and normalisation.

Every immediate sub-directory of the generators directory is one generator.
It holds a ``generator.json`` describing the files to render and the
generators it depends on, the template files themselves, and optionally a
``helpers.py`` that registers extra template helpers.

Loading is a pure read.  :func:`bind_generator` then specialises a loaded
definition for one invocation's :class:`~scaffolt.models.TemplateContext`.
"""

from __future__ import annotations

import json
import posixpath
from pathlib import Path

from pydantic import ValidationError

from .errors import ConfigNotFoundError, InvalidGeneratorError
from .models import (
    DependencyRef,
    FileMethod,
    FileSpec,
    GeneratorConfig,
    GeneratorDefinition,
    GeneratorSummary,
    TemplateContext,
)
from .templates import TemplateRenderer
from .utils import load_json, print_warning

CONFIG_FILENAME = "generator.json"
HELPERS_FILENAME = "helpers.py"


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def check_generators_path(generators_path: str | Path) -> Path:
    """Return *generators_path* as a ``Path`` or raise ``ConfigNotFoundError``.

    A path that exists but is not a directory counts as missing.
    """
    root = Path(generators_path)
    if not root.is_dir():
        raise ConfigNotFoundError(root)
    return root


def list_generator_dirs(generators_path: str | Path) -> list[Path]:
    """Return the generator directories under *generators_path*, sorted by name.

    Plain files and hidden directories are ignored.
    """
    root = check_generators_path(generators_path)
    return sorted(
        (entry for entry in root.iterdir() if entry.is_dir() and not entry.name.startswith(".")),
        key=lambda entry: entry.name,
    )


def read_generator_config(directory: Path) -> GeneratorConfig:
    """Parse and validate ``<directory>/generator.json``.

    Raises:
        InvalidGeneratorError: If the file is missing, unreadable, not JSON,
            or does not match the generator schema.
    """
    generator_type = directory.name
    config_path = directory / CONFIG_FILENAME
    try:
        data = load_json(config_path)
    except FileNotFoundError as exc:
        raise InvalidGeneratorError(generator_type, f"missing {CONFIG_FILENAME}") from exc
    except json.JSONDecodeError as exc:
        raise InvalidGeneratorError(generator_type, f"{CONFIG_FILENAME} is not valid JSON: {exc}") from exc
    except (OSError, ValueError) as exc:
        raise InvalidGeneratorError(generator_type, str(exc)) from exc

    try:
        return GeneratorConfig.model_validate(data)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise InvalidGeneratorError(generator_type, problems) from exc


def normalize_generator(directory: Path, config: GeneratorConfig) -> GeneratorDefinition:
    """Turn a parsed ``generator.json`` into a frozen ``GeneratorDefinition``.

    * ``from`` is resolved against the generator directory.
    * ``to`` is split into the destination ``base`` name and ``parent_path``.
    * An absent ``method`` defaults to ``create``.
    * A dependency given only by ``name`` uses that name as its type.
    """
    generator_type = directory.name
    root = directory.resolve()

    files: list[FileSpec] = []
    for entry in config.files:
        files.append(FileSpec(
            source=root / entry.source,
            base=posixpath.basename(entry.to),
            parent_path=posixpath.dirname(entry.to) or ".",
            method=entry.method or FileMethod.CREATE,
            method_set=entry.method is not None,
        ))

    dependencies: list[DependencyRef] = []
    for index, entry in enumerate(config.dependencies):
        dep_type, dep_name = entry.type, entry.name
        if not dep_type:
            dep_type, dep_name = entry.name, None
        if not dep_type:
            raise InvalidGeneratorError(
                generator_type, f"dependencies.{index}: a dependency needs a type or name"
            )
        dependencies.append(DependencyRef(
            type=dep_type,
            name=dep_name,
            parent_path=entry.parent_path,
            method=entry.method,
        ))

    helpers_path = root / HELPERS_FILENAME
    return GeneratorDefinition(
        type=generator_type,
        path=root,
        name=config.name,
        description=config.description,
        files=tuple(files),
        dependencies=tuple(dependencies),
        helpers_path=helpers_path if helpers_path.is_file() else None,
    )


def load_generators(generators_path: str | Path) -> list[GeneratorDefinition]:
    """Load every generator under *generators_path*.

    Raises:
        ConfigNotFoundError: If *generators_path* does not exist.
        InvalidGeneratorError: If any sub-directory is not a valid generator.
    """
    return [
        normalize_generator(directory, read_generator_config(directory))
        for directory in list_generator_dirs(generators_path)
    ]


def summarize_generators(generators_path: str | Path) -> list[GeneratorSummary]:
    """Return type, name and description of every generator, without normalising."""
    summaries: list[GeneratorSummary] = []
    for directory in list_generator_dirs(generators_path):
        config = read_generator_config(directory)
        summaries.append(GeneratorSummary(
            type=directory.name,
            name=config.name,
            description=config.description,
        ))
    return summaries


# ---------------------------------------------------------------------------
# Binding to an invocation context
# ---------------------------------------------------------------------------


def bind_generator(
    generator: GeneratorDefinition,
    context: TemplateContext,
    renderer: TemplateRenderer,
) -> GeneratorDefinition:
    """Specialise *generator* for one scaffold invocation.

    When the context carries a ``parentPath`` it replaces the directory of
    every file.  Each dependency edge gets its ``type``, ``name`` and
    ``parentPath`` rendered against a copy of the context whose
    ``parentPath`` is the generator's own, with ``name`` and ``parentPath``
    defaulting to the context values.
    """
    parent_path = context.parent_path or None

    files = generator.files
    if parent_path:
        files = tuple(spec.model_copy(update={"parent_path": parent_path}) for spec in files)

    dep_context = context.clone(parent_path=parent_path)
    dependencies: list[DependencyRef] = []
    for dep in generator.dependencies:
        if dep.parent_path and not parent_path:
            print_warning(
                f'generator "{generator.type}" needs parentPath to function correctly '
                f"with dependencies"
            )
        dependencies.append(DependencyRef(
            type=renderer.render_string(dep.type, dep_context),
            name=renderer.render_string(dep.name or dep_context.name, dep_context) or None,
            parent_path=renderer.render_string(dep.parent_path or parent_path, dep_context) or None,
            method=dep.method,
        ))

    return generator.model_copy(update={
        "files": files,
        "dependencies": tuple(dependencies),
        "parent_path": parent_path,
    })
