"""File scaffolding: render generator files and apply or revert them.

Forward (apply) mode, per file method:

* ``create``    -- write the rendered template unless the target exists.
* ``overwrite`` -- write the rendered template unconditionally.
* ``append``    -- append the rendered template, creating the file if needed.

Revert mode:

* ``create`` / ``overwrite`` -- delete the target.
* ``append`` -- remove the first verbatim occurrence of the rendered
  template from the target.

Missing parent directories are created (``0o755``) before any write.  Files
whose destination directory is named ``migrations`` get a ``fileNumber``
variable holding a six-digit sequence number.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path

from .errors import MissingTargetError, RenderFailureError, ScaffoldError
from .models import (
    FileMethod,
    FileOutcome,
    FileSpec,
    GeneratorDefinition,
    OutcomeStatus,
    TemplateContext,
)
from .templates import TemplateRenderer
from .utils import ensure_dir, pluralize, print_action, print_warning


# ---------------------------------------------------------------------------
# Migrations numbering
# ---------------------------------------------------------------------------

MIGRATIONS_DIRNAME = "migrations"
MIGRATION_DIGITS = 6
MIGRATION_STEP = 5

_MIGRATION_PREFIX = re.compile(r"^([0-9]{%d})" % MIGRATION_DIGITS)


def _migration_numbers(directory: Path) -> list[int]:
    """Numeric prefixes of the entries in *directory*, highest first."""
    numbers = []
    for entry in directory.iterdir():
        match = _MIGRATION_PREFIX.match(entry.name)
        if match:
            numbers.append(int(match.group(1)))
    return sorted(numbers, reverse=True)


def next_migration_number(directory: str | Path) -> str:
    """Return the prefix for a new migration in *directory*.

    The directory is created if missing.  The result is the highest existing
    six-digit prefix plus 5, or ``000005`` when there is none.
    """
    directory = ensure_dir(directory)
    numbers = _migration_numbers(directory)
    highest = numbers[0] if numbers else 0
    return str(highest + MIGRATION_STEP).zfill(MIGRATION_DIGITS)


def latest_migration_number(directory: str | Path) -> str:
    """Return the highest existing prefix in *directory* (``000005`` if none).

    Unlike :func:`next_migration_number` the directory is never created.
    """
    directory = Path(directory)
    numbers = _migration_numbers(directory) if directory.is_dir() else []
    highest = numbers[0] if numbers else MIGRATION_STEP
    return str(highest).zfill(MIGRATION_DIGITS)


# ---------------------------------------------------------------------------
# Destination rendering
# ---------------------------------------------------------------------------


def file_context(spec: FileSpec, context: TemplateContext) -> TemplateContext:
    """Copy *context* with the name override carried by *spec* applied."""
    if spec.name and spec.name != context.name:
        return context.clone(name=spec.name, plural_name=pluralize(spec.name))
    return context.clone()


def render_destination(
    renderer: TemplateRenderer,
    spec: FileSpec,
    context: TemplateContext,
) -> tuple[str, TemplateContext]:
    """Render the destination of *spec* without touching the file system.

    Returns the destination path (relative to the project root unless the
    template makes it absolute) and the context with ``parentPath`` set to
    the rendered parent directory.
    """
    parent = renderer.render_string(spec.parent_path, context)
    bound = context.clone(parent_path=parent)
    return renderer.render_string(f"{parent}/{spec.base}", bound), bound


# ---------------------------------------------------------------------------
# FileScaffolder
# ---------------------------------------------------------------------------


@dataclass
class FilePlan:
    """A file operation whose destination has been rendered."""

    spec: FileSpec
    destination: Path
    context: TemplateContext
    generator: str = ""


class FileScaffolder:
    """Applies (or reverts) the files of generators to a project directory.

    Attributes:
        renderer: Session renderer; generator helpers are loaded into it.
        root: Directory destination paths are resolved against.
        revert: Undo the files instead of creating them.
        max_parallel: Upper bound on concurrent file operations.
    """

    def __init__(
        self,
        renderer: TemplateRenderer,
        root: str | Path = ".",
        *,
        revert: bool = False,
        max_parallel: int = 8,
    ) -> None:
        self.renderer = renderer
        self.root = Path(root)
        self.revert = revert
        self.max_parallel = max(1, max_parallel)

    # -- Public API --------------------------------------------------------

    async def scaffold_generator(
        self,
        generator: GeneratorDefinition,
        context: TemplateContext,
    ) -> list[FileOutcome]:
        """Apply every file of *generator*, concurrently, and wait for all.

        Destinations are planned one after another (migration numbers depend
        on directory contents), then the file operations fan out.  If one
        raises ``ScaffoldError`` the operations that have not started yet are
        cancelled and the error propagates.

        Returns:
            One outcome per file, in the order of ``generator.files``.
        """
        if generator.helpers_path is not None:
            self.renderer.load_helpers(generator.helpers_path)

        plans = [self.plan(spec, context, generator.type) for spec in generator.files]
        semaphore = asyncio.Semaphore(self.max_parallel)

        async def _run(plan: FilePlan) -> FileOutcome:
            async with semaphore:
                return await asyncio.to_thread(self.apply, plan)

        tasks = [asyncio.create_task(_run(plan)) for plan in plans]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    def plan(self, spec: FileSpec, context: TemplateContext, generator: str = "") -> FilePlan:
        """Render the destination of *spec*, assigning a migration number if needed."""
        ctx = file_context(spec, context)
        parent = self.renderer.render_string(spec.parent_path, ctx)
        if Path(parent).name == MIGRATIONS_DIRNAME:
            directory = self.root / parent
            number = latest_migration_number(directory) if self.revert else next_migration_number(directory)
            ctx = ctx.clone(file_number=number)

        destination, ctx = render_destination(self.renderer, spec, ctx)
        return FilePlan(spec=spec, destination=self.root / destination, context=ctx, generator=generator)

    def apply(self, plan: FilePlan) -> FileOutcome:
        """Perform one planned operation and report its outcome.

        Missing revert targets, OS errors and undecodable files end up in the
        outcome; a parent directory that cannot be created raises
        ``ScaffoldError``.
        """
        try:
            if not self.revert:
                return self._generate(plan)
            if plan.spec.method == FileMethod.APPEND:
                return self._amend(plan)
            return self._destroy(plan)
        except MissingTargetError as exc:
            print_action("failed", plan.destination, "does not exist")
            return self._outcome(plan, OutcomeStatus.FAILED, exc)
        except ScaffoldError:
            raise
        except OSError as exc:
            print_action("failed", plan.destination, exc.strerror or str(exc))
            return self._outcome(plan, OutcomeStatus.FAILED, exc)
        except UnicodeDecodeError as exc:
            print_action("failed", plan.destination, f"not UTF-8 text: {exc.reason}")
            return self._outcome(plan, OutcomeStatus.FAILED, exc)

    # -- Forward operations ------------------------------------------------

    def _generate(self, plan: FilePlan) -> FileOutcome:
        destination = plan.destination
        method = plan.spec.method
        exists = destination.exists()

        if exists and method == FileMethod.CREATE:
            print_action("skip", destination, "already exists")
            return self._outcome(plan, OutcomeStatus.SKIPPED)

        contents = self._render_contents(plan)
        self._ensure_parent(destination)

        if method == FileMethod.APPEND:
            print_action("append", destination)
            with open(destination, "a", encoding="utf-8", newline="") as fh:
                fh.write(contents)
            return self._outcome(plan, OutcomeStatus.APPENDED)

        print_action("overwrite" if exists else "create", destination)
        _write_text(destination, contents)
        return self._outcome(plan, OutcomeStatus.OVERWRITTEN if exists else OutcomeStatus.CREATED)

    # -- Revert operations -------------------------------------------------

    def _destroy(self, plan: FilePlan) -> FileOutcome:
        try:
            plan.destination.unlink()
        except FileNotFoundError as exc:
            raise MissingTargetError(plan.destination) from exc
        print_action("destroy", plan.destination)
        return self._outcome(plan, OutcomeStatus.DESTROYED)

    def _amend(self, plan: FilePlan) -> FileOutcome:
        destination = plan.destination
        if not destination.is_file():
            raise MissingTargetError(destination)

        contents = self._render_contents(plan)
        existing = _read_text(destination)
        if not contents or contents not in existing:
            print_action("unchanged", destination, "appended content not found")
            return self._outcome(plan, OutcomeStatus.UNCHANGED)

        _write_text(destination, existing.replace(contents, "", 1))
        print_action("amend", destination)
        return self._outcome(plan, OutcomeStatus.AMENDED)

    # -- Internal helpers --------------------------------------------------

    def _render_contents(self, plan: FilePlan) -> str:
        """Render the template of *plan*, falling back to its raw text."""
        template = plan.spec.source.read_text(encoding="utf-8")
        try:
            return self.renderer.render_string(template, plan.context)
        except RenderFailureError as exc:
            print_warning(f"{plan.spec.source}: {exc}; using the unrendered template")
            return template

    def _ensure_parent(self, destination: Path) -> None:
        parent = destination.parent
        if parent.is_dir():
            return
        print_action("init", parent)
        try:
            ensure_dir(parent, 0o755)
        except OSError as exc:
            raise ScaffoldError(f"Cannot create directory {parent}: {exc}") from exc

    @staticmethod
    def _outcome(
        plan: FilePlan,
        status: OutcomeStatus,
        error: Exception | None = None,
    ) -> FileOutcome:
        return FileOutcome(
            path=plan.destination,
            status=status,
            method=plan.spec.method,
            generator=plan.generator,
            error=error,
        )


def _read_text(path: Path) -> str:
    with open(path, "r", encoding="utf-8", newline="") as fh:
        return fh.read()


def _write_text(path: Path, contents: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.write(contents)
