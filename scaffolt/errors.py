"""Error taxonomy for scaffolt.

Fatal errors (``ConfigNotFoundError``, ``InvalidGeneratorError``,
``UnknownGeneratorError``, ``CyclicDependencyError``, ``ScaffoldError``)
propagate out of :class:`scaffolt.pipeline.Scaffolt`.  ``RenderFailureError``
is recovered by the file scaffolder, and ``MissingTargetError`` is reported
as the outcome of a single file without stopping its siblings.
"""

from __future__ import annotations

from pathlib import Path


class ScaffoltError(Exception):
    """Base class for every error raised by scaffolt."""


class ConfigNotFoundError(ScaffoltError):
    """Raised when the generators directory is missing or is not a directory."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f'Generators directory "{path}" is missing or is not a directory')


class InvalidGeneratorError(ScaffoltError):
    """Raised when a generator directory has no readable, valid config."""

    def __init__(self, generator_type: str, reason: str) -> None:
        self.generator_type = generator_type
        self.reason = reason
        super().__init__(f'Invalid generator "{generator_type}": {reason}')


class UnknownGeneratorError(ScaffoltError):
    """Raised when a generator type has no loaded definition."""

    def __init__(self, generator_type: str) -> None:
        self.generator_type = generator_type
        super().__init__(f'Unknown generator "{generator_type}"')


class CyclicDependencyError(ScaffoltError):
    """Raised when a generator depends on itself, directly or transitively."""

    def __init__(self, chain: list[str]) -> None:
        self.chain = list(chain)
        super().__init__(f"Cyclic generator dependency: {' -> '.join(self.chain)}")


class RenderFailureError(ScaffoltError):
    """Raised when a template cannot be compiled or rendered."""


class MissingTargetError(ScaffoltError):
    """Raised when a revert targets a file that does not exist."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"Cannot revert {path}: file does not exist")


class ScaffoldError(ScaffoltError):
    """Raised when a file operation fails in a way that aborts the run."""
