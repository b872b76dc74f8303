"""Pydantic v2 models for generator definitions and template contexts.

Two layers are modelled here:

* The raw ``generator.json`` schema (``GeneratorConfig`` and its entries),
  validated as-is when a generator directory is loaded.
* The normalised, frozen structures the rest of the engine works with
  (``GeneratorDefinition``, ``FileSpec``, ``DependencyRef``) together with
  the ``TemplateContext`` that templates are rendered against and the
  per-file ``FileOutcome`` records produced by a scaffold run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class FileMethod(str, Enum):
    """How a rendered template is written to its destination."""
    CREATE = "create"
    OVERWRITE = "overwrite"
    APPEND = "append"


class OutcomeStatus(str, Enum):
    """Terminal state of a single file operation."""
    CREATED = "created"
    OVERWRITTEN = "overwritten"
    APPENDED = "appended"
    SKIPPED = "skipped"
    DESTROYED = "destroyed"
    AMENDED = "amended"
    UNCHANGED = "unchanged"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Raw generator.json schema
# ---------------------------------------------------------------------------

class FileEntry(BaseModel):
    """One ``files`` item of a ``generator.json``."""
    model_config = ConfigDict(populate_by_name=True)

    source: str = Field(..., alias="from", description="Template path relative to the generator")
    to: str = Field(..., description="Destination path template, e.g. 'app/models/{{name}}.py'")
    method: Optional[FileMethod] = Field(default=None, description="Defaults to 'create'")


class DependencyEntry(BaseModel):
    """One ``dependencies`` item of a ``generator.json``."""
    model_config = ConfigDict(populate_by_name=True)

    type: Optional[str] = Field(default=None, description="Generator type to run first")
    name: Optional[str] = Field(default=None, description="Name override for the dependency")
    parent_path: Optional[str] = Field(default=None, alias="parentPath")
    method: Optional[FileMethod] = Field(default=None)


class GeneratorConfig(BaseModel):
    """A whole ``generator.json`` document."""

    name: Optional[str] = None
    description: Optional[str] = None
    files: list[FileEntry] = Field(...)
    dependencies: list[DependencyEntry] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Normalised structures
# ---------------------------------------------------------------------------

class FileSpec(BaseModel):
    """A single templated file action, ready to be rendered."""
    model_config = ConfigDict(frozen=True)

    source: Path = Field(..., description="Absolute path of the template file")
    base: str = Field(..., description="Template for the destination base name")
    parent_path: str = Field(..., description="Template for the destination directory")
    method: FileMethod = Field(default=FileMethod.CREATE)
    method_set: bool = Field(default=False, description="Whether the config named a method")
    name: Optional[str] = Field(default=None, description="Name override from a dependency edge")

    @property
    def destination_template(self) -> str:
        """``parent_path/base`` before rendering."""
        return f"{self.parent_path}/{self.base}"


class DependencyRef(BaseModel):
    """An edge in the generator graph."""
    model_config = ConfigDict(frozen=True)

    type: str
    name: Optional[str] = None
    parent_path: Optional[str] = None
    method: Optional[FileMethod] = None


class GeneratorDefinition(BaseModel):
    """A normalised scaffolding recipe."""
    model_config = ConfigDict(frozen=True)

    type: str = Field(..., description="Unique id, the name of the generator directory")
    path: Path = Field(..., description="The generator directory")
    name: Optional[str] = None
    description: Optional[str] = None
    files: tuple[FileSpec, ...] = Field(default_factory=tuple)
    dependencies: tuple[DependencyRef, ...] = Field(default_factory=tuple)
    helpers_path: Optional[Path] = None
    parent_path: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.type


class GeneratorSummary(BaseModel):
    """What ``list`` reports about a generator."""

    type: str
    name: Optional[str] = None
    description: Optional[str] = None


# ---------------------------------------------------------------------------
# Template context
# ---------------------------------------------------------------------------

def clone_value(value: Any) -> Any:
    """Deep-copy plain containers (dict, list, tuple); scalars are shared."""
    if isinstance(value, dict):
        return {key: clone_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [clone_value(item) for item in value]
    if isinstance(value, tuple):
        return tuple(clone_value(item) for item in value)
    return value


class TemplateContext(BaseModel):
    """Variables available to every template of a scaffold run.

    Templates see the camelCase names (``moduleName``, ``pluralName``,
    ``parentPath``, ``fileNumber``) plus every key of ``extra``.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="")
    module_name: str = Field(default="", alias="moduleName")
    plural_name: str = Field(default="", alias="pluralName")
    parent_path: Optional[str] = Field(default=None, alias="parentPath")
    type: str = Field(default="")
    file_number: Optional[str] = Field(default=None, alias="fileNumber")
    extra: dict[str, Any] = Field(default_factory=dict)

    def clone(self, **updates: Any) -> "TemplateContext":
        """Return an independent copy, optionally with some fields replaced.

        ``extra`` is deep-copied so that changes to nested dicts or lists of
        the copy never show up in the original.
        """
        data = {
            "name": self.name,
            "module_name": self.module_name,
            "plural_name": self.plural_name,
            "parent_path": self.parent_path,
            "type": self.type,
            "file_number": self.file_number,
            "extra": clone_value(self.extra),
        }
        data.update(updates)
        return TemplateContext(**data)

    def as_template_vars(self) -> dict[str, Any]:
        """Return the mapping handed to the template engine."""
        variables: dict[str, Any] = clone_value(self.extra)
        variables.update({
            "name": self.name,
            "moduleName": self.module_name,
            "pluralName": self.plural_name,
            "type": self.type,
        })
        if self.parent_path is not None:
            variables["parentPath"] = self.parent_path
        if self.file_number is not None:
            variables["fileNumber"] = self.file_number
        return variables


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

@dataclass
class FileOutcome:
    """Result of applying or reverting one file."""

    path: Path
    status: OutcomeStatus
    method: FileMethod
    generator: str = ""
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.status not in (OutcomeStatus.FAILED, OutcomeStatus.UNCHANGED)


@dataclass
class ScaffoldResult:
    """Aggregated outcomes of a whole ``scaffold`` run."""

    generator_type: str
    revert: bool
    generators: list[str] = field(default_factory=list)
    outcomes: list[FileOutcome] = field(default_factory=list)

    @property
    def errors(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def success(self) -> bool:
        return not self.errors

    def counts(self) -> dict[str, int]:
        """Number of outcomes per status, only for statuses that occurred."""
        result: dict[str, int] = {}
        for outcome in self.outcomes:
            result[outcome.status.value] = result.get(outcome.status.value, 0) + 1
        return result
