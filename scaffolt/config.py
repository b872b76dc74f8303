"""scaffolt configuration.

Typed settings for a scaffold run, built on Pydantic v2 so values are
validated at construction time and can be taken from the environment.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


DEFAULT_GENERATORS_PATH = "generators"


class ScaffoldConfig(BaseModel):
    """Settings shared by every scaffolt operation.

    Instances are typically created once by the CLI entry point and handed to
    :class:`scaffolt.pipeline.Scaffolt`.
    """

    generators_path: Path = Field(
        default=Path(DEFAULT_GENERATORS_PATH),
        description="Directory holding one sub-directory per generator",
    )
    project_root: Path = Field(
        default=Path("."),
        description="Directory that destination paths are relative to",
    )
    revert: bool = Field(default=False, description="Undo generators instead of applying them")
    max_parallel: int = Field(
        default=8, ge=1, description="Maximum concurrent file operations per generator"
    )

    @property
    def generators_dir(self) -> Path:
        """``generators_path`` resolved against ``project_root`` unless absolute."""
        if self.generators_path.is_absolute():
            return self.generators_path
        return self.project_root / self.generators_path

    @classmethod
    def from_env(cls, **overrides: Any) -> "ScaffoldConfig":
        """Build a ``ScaffoldConfig`` from environment variables.

        Recognised variables (all optional):
            SCAFFOLT_GENERATORS_PATH, SCAFFOLT_PROJECT_ROOT, SCAFFOLT_MAX_PARALLEL.

        Keyword arguments whose value is not ``None`` take precedence over the
        environment.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("SCAFFOLT_GENERATORS_PATH"):
            kwargs["generators_path"] = Path(os.environ["SCAFFOLT_GENERATORS_PATH"])
        if os.environ.get("SCAFFOLT_PROJECT_ROOT"):
            kwargs["project_root"] = Path(os.environ["SCAFFOLT_PROJECT_ROOT"])
        if os.environ.get("SCAFFOLT_MAX_PARALLEL"):
            kwargs["max_parallel"] = int(os.environ["SCAFFOLT_MAX_PARALLEL"])

        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kwargs)
