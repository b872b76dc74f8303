"""scaffolt orchestrator and command-line entry point.

Ties the loader, resolver and file scaffolder together:

1. Load every generator under the generators directory.
2. Bind them to the invocation's template context.
3. Resolve the dependency tree of the requested type, leaf-first.
4. Apply (or revert) each generator's files, one generator at a time.

Usage::

    scaffolt controller user
    scaffolt model user --revert
    scaffolt --list
    scaffolt --describe controller
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, Field

from .config import ScaffoldConfig
from .errors import ScaffoltError
from .loader import bind_generator, check_generators_path, load_generators, summarize_generators
from .models import (
    FileMethod,
    GeneratorDefinition,
    GeneratorSummary,
    ScaffoldResult,
    TemplateContext,
)
from .resolver import resolve_dependencies
from .scaffolder import FileScaffolder, file_context, render_destination
from .templates import TemplateRenderer
from .utils import (
    console,
    parse_variables,
    pluralize,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)

# Variable prefixes recognised by ``build_context``.
VERBATIM_PREFIX = "$"
RENAMED_PREFIX = "@"


# ---------------------------------------------------------------------------
# Context construction
# ---------------------------------------------------------------------------


def build_context(
    generator_type: str,
    name: str,
    module_name: str | None = None,
    *,
    plural_name: str | None = None,
    parent_path: str | None = None,
    variables: Mapping[str, Any] | None = None,
) -> TemplateContext:
    """Build the template context of a scaffold run.

    Keys of *variables* starting with ``$`` are injected as-is (``$license``
    stays ``$license``); keys starting with ``@`` are injected without the
    prefix (``@author`` becomes ``author``).  Other keys are ignored.
    """
    extra: dict[str, Any] = {}
    for key, value in (variables or {}).items():
        if key.startswith(VERBATIM_PREFIX):
            extra[key] = value
        elif key.startswith(RENAMED_PREFIX) and len(key) > 1:
            extra[key[1:]] = value

    return TemplateContext(
        name=name,
        module_name=module_name if module_name is not None else name,
        plural_name=plural_name or pluralize(name),
        parent_path=parent_path,
        type=generator_type,
        extra=extra,
    )


# ---------------------------------------------------------------------------
# Introspection models
# ---------------------------------------------------------------------------


class FileAction(BaseModel):
    """One file operation a generator would perform."""

    method: FileMethod
    destination: str


class GeneratorDescription(BaseModel):
    """A generator of a dependency tree together with its file actions."""

    generator: GeneratorDefinition
    actions: list[FileAction] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class Scaffolt:
    """Runs generators found under ``config.generators_dir``.

    Attributes:
        config: Settings of this instance.
    """

    def __init__(self, config: ScaffoldConfig | None = None) -> None:
        self.config = config or ScaffoldConfig()

    # -- Apply / revert ----------------------------------------------------

    async def scaffold(
        self,
        generator_type: str,
        name: str,
        module_name: str | None = None,
        *,
        revert: bool | None = None,
        plural_name: str | None = None,
        parent_path: str | None = None,
        variables: Mapping[str, Any] | None = None,
    ) -> ScaffoldResult:
        """Apply (or revert) *generator_type* and all of its dependencies.

        Generators run one after another in leaf-first order; the files of
        a single generator are processed concurrently.

        Returns:
            Every file outcome, in execution order.

        Raises:
            ConfigNotFoundError: If the generators directory is missing.
            InvalidGeneratorError: If a generator config cannot be loaded.
            UnknownGeneratorError: If a requested type has no definition.
            CyclicDependencyError: If the dependency graph has a cycle.
            ScaffoldError: If a destination directory cannot be created.
        """
        revert = self.config.revert if revert is None else revert
        context = build_context(
            generator_type,
            name,
            module_name,
            plural_name=plural_name,
            parent_path=parent_path,
            variables=variables,
        )

        renderer = TemplateRenderer()
        tree = self._resolve(generator_type, context, renderer)
        scaffolder = FileScaffolder(
            renderer,
            self.config.project_root,
            revert=revert,
            max_parallel=self.config.max_parallel,
        )

        result = ScaffoldResult(
            generator_type=generator_type,
            revert=revert,
            generators=[generator.type for generator in tree],
        )
        for generator in tree:
            result.outcomes.extend(await scaffolder.scaffold_generator(generator, context))
        return result

    # -- Introspection -----------------------------------------------------

    def list_generators(self) -> list[GeneratorSummary]:
        """Return a summary of every available generator, sorted by type."""
        return summarize_generators(self.config.generators_dir)

    def describe(self, generator_type: str) -> list[GeneratorDescription]:
        """Describe what scaffolding *generator_type* would do.

        The requested generator comes first, followed by its dependencies in
        reverse execution order.  Destinations are rendered with the
        placeholder name ``name``; nothing is written to disk.
        """
        context = TemplateContext(
            name="name",
            module_name="name",
            plural_name="names",
            type=generator_type,
        )
        renderer = TemplateRenderer()
        tree = self._resolve(generator_type, context, renderer)

        descriptions: list[GeneratorDescription] = []
        for generator in reversed(tree):
            if generator.helpers_path is not None:
                renderer.load_helpers(generator.helpers_path)
            actions = []
            for spec in generator.files:
                destination, _ = render_destination(renderer, spec, file_context(spec, context))
                actions.append(FileAction(method=spec.method, destination=destination))
            descriptions.append(GeneratorDescription(generator=generator, actions=actions))
        return descriptions

    # -- Internal ----------------------------------------------------------

    def _resolve(
        self,
        generator_type: str,
        context: TemplateContext,
        renderer: TemplateRenderer,
    ) -> list[GeneratorDefinition]:
        generators_dir = check_generators_path(self.config.generators_dir)
        generators = [
            bind_generator(generator, context, renderer)
            for generator in load_generators(generators_dir)
        ]
        return resolve_dependencies(generators, generator_type)


# ---------------------------------------------------------------------------
# Console output
# ---------------------------------------------------------------------------


def print_generator_list(summaries: list[GeneratorSummary], generators_path: str | Path) -> None:
    """Print ``* name (description)`` for every generator."""
    console.print(f"List of available generators in {generators_path}:", highlight=False, soft_wrap=True)
    for summary in summaries:
        line = f" * {summary.name or summary.type}"
        if summary.description:
            line += f" ({summary.description})"
        console.print(line, highlight=False, markup=False)


def print_generator_help(generator_type: str, descriptions: list[GeneratorDescription]) -> None:
    """Print the documentation of a generator and the files it would touch."""
    for index, description in enumerate(descriptions):
        generator = description.generator
        if index == 0:
            console.print(f"Documentation for '{generator_type}' generator:", highlight=False)
            if generator.description:
                console.print(f"{generator.description}\n", highlight=False, markup=False)
            console.print(f"'scaffolt {generator_type} name'", highlight=False, markup=False)
        else:
            line = f" * {generator.type}"
            if generator.description:
                line += f" ({generator.description})"
            console.print(line, highlight=False, markup=False)

        for action in description.actions:
            console.print(
                f"\twill {action.method.value} {action.destination}",
                highlight=False,
                markup=False,
            )

        if index == 0 and len(descriptions) > 1:
            console.print()
            console.print("Dependencies:")


def print_scaffold_summary(result: ScaffoldResult) -> None:
    """Print a per-status count table for a finished run."""
    data = {"Generator": result.generator_type, "Mode": "revert" if result.revert else "apply"}
    data["Generators run"] = ", ".join(result.generators)
    for status, count in result.counts().items():
        data[status.capitalize()] = str(count)
    print_summary_table(data, title="Scaffold summary")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``scaffolt`` / ``python -m scaffolt``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="scaffolt",
        description="scaffolt -- render generator templates into a project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  scaffolt controller user\n"
            "  scaffolt model user -V @author=Jane --parent-path app/models\n"
            "  scaffolt model user --revert\n"
            "  scaffolt --list\n"
            "  scaffolt --describe controller\n"
        ),
    )

    parser.add_argument("type", nargs="?", help="Generator type to run")
    parser.add_argument("name", nargs="?", help="Name passed to the templates as {{name}}")
    parser.add_argument(
        "--module-name", "-m",
        default=None,
        help="Module name passed as {{moduleName}} (default: NAME)",
    )
    parser.add_argument(
        "--plural-name",
        default=None,
        help="Plural passed as {{pluralName}} (default: plural of NAME)",
    )
    parser.add_argument(
        "--parent-path", "-p",
        default=None,
        help="Destination directory for every generated file",
    )
    parser.add_argument(
        "--revert", "-r",
        action="store_true",
        help="Remove generated files instead of creating them",
    )
    parser.add_argument(
        "--generators", "-g",
        default=None,
        help="Generators directory (default: ./generators)",
    )
    parser.add_argument(
        "--root",
        default=None,
        help="Project root destinations are relative to (default: .)",
    )
    parser.add_argument(
        "--max-parallel",
        type=int,
        default=None,
        help="Maximum concurrent file operations per generator",
    )
    parser.add_argument(
        "--var", "-V",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Extra template variable; '@key' is exposed as 'key', '$key' as '$key'. Repeatable.",
    )
    parser.add_argument("--list", "-l", action="store_true", help="List available generators")
    parser.add_argument("--describe", metavar="TYPE", help="Describe a generator and its dependencies")

    args = parser.parse_args(argv)

    try:
        variables = parse_variables(args.var)
    except ValueError as exc:
        print_error(f"Error: {exc}")
        sys.exit(2)

    try:
        config = ScaffoldConfig.from_env(
            generators_path=Path(args.generators) if args.generators else None,
            project_root=Path(args.root) if args.root else None,
            max_parallel=args.max_parallel,
            revert=args.revert,
        )
    except ValueError as exc:
        print_error(f"Error: invalid configuration: {exc}")
        sys.exit(2)

    app = Scaffolt(config)

    try:
        if args.list:
            print_generator_list(app.list_generators(), config.generators_dir)
            return
        if args.describe:
            print_generator_help(args.describe, app.describe(args.describe))
            return

        if not args.type or not args.name:
            parser.print_usage()
            print_error("Error: TYPE and NAME are required")
            sys.exit(2)

        result = asyncio.run(app.scaffold(
            args.type,
            args.name,
            args.module_name,
            plural_name=args.plural_name,
            parent_path=args.parent_path,
            variables=variables,
        ))
    except ScaffoltError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)

    print_scaffold_summary(result)
    if result.success:
        print_success("Reverted." if result.revert else "Done.")
        return
    for outcome in result.errors:
        print_warning(f"{outcome.path}: {outcome.error or outcome.status.value}")
    print_error(f"{len(result.errors)} file operation(s) did not succeed")
    sys.exit(1)


if __name__ == "__main__":
    main()
