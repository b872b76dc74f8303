"""Dependency resolution for generators.

Flattens the generator graph rooted at one type into a leaf-first list:
every generator appears after all of its dependencies, so the list can be
applied top to bottom.  A generator reached through several parents
(a diamond) appears once per path, each copy carrying the overrides of the
edge that reached it.  Only true cycles are rejected.
"""

from __future__ import annotations

from typing import Sequence

from .errors import CyclicDependencyError, UnknownGeneratorError
from .models import DependencyRef, GeneratorDefinition


def resolve_dependencies(
    generators: Sequence[GeneratorDefinition],
    root_type: str,
) -> list[GeneratorDefinition]:
    """Return *root_type* and its transitive dependencies, leaf-first.

    Args:
        generators: Every loaded (and bound) generator.
        root_type: The generator requested by the caller.

    Returns:
        Generators in execution order; the last item is *root_type* itself.

    Raises:
        UnknownGeneratorError: If *root_type* or any dependency has no
            definition.
        CyclicDependencyError: If a generator is reached again while it is
            still being expanded.
    """
    index = {generator.type: generator for generator in generators}
    ordered: list[GeneratorDefinition] = []
    _expand(index, root_type, None, ordered, [])
    return ordered


def apply_override(generator: GeneratorDefinition, edge: DependencyRef) -> GeneratorDefinition:
    """Return a copy of *generator* with the overrides carried by *edge*.

    * ``parent_path`` replaces the directory of every file.
    * ``name`` is attached to every file.
    * ``method`` applies only to files whose config did not name one.
    """
    files = []
    for spec in generator.files:
        updates: dict = {}
        if edge.parent_path:
            updates["parent_path"] = edge.parent_path
        if edge.name:
            updates["name"] = edge.name
        if edge.method is not None and not spec.method_set:
            updates["method"] = edge.method
        files.append(spec.model_copy(update=updates) if updates else spec)

    update: dict = {"files": tuple(files)}
    if edge.parent_path:
        update["parent_path"] = edge.parent_path
    return generator.model_copy(update=update)


def _expand(
    index: dict[str, GeneratorDefinition],
    generator_type: str,
    edge: DependencyRef | None,
    ordered: list[GeneratorDefinition],
    path: list[str],
) -> None:
    if generator_type in path:
        raise CyclicDependencyError(path[path.index(generator_type):] + [generator_type])

    generator = index.get(generator_type)
    if generator is None:
        raise UnknownGeneratorError(generator_type)
    if edge is not None:
        generator = apply_override(generator, edge)

    path.append(generator_type)
    for dependency in generator.dependencies:
        _expand(index, dependency.type, dependency, ordered, path)
    path.pop()

    ordered.append(generator)
