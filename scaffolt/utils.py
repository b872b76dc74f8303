"""Shared utility functions for scaffolt.

Provides Rich-based console reporting, JSON I/O, file-system helpers,
English pluralisation for template variables, and parsing of ad hoc
``KEY=VALUE`` context variables supplied on the command line.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Iterable

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file that holds a top-level object.

    Args:
        path: Path to the JSON file.

    Returns:
        Parsed dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the top-level value is not an object.
    """
    file_path = Path(path)
    raw = file_path.read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object in {file_path}, got {type(data).__name__}")
    return data


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path, mode: int = 0o755) -> Path:
    """Create a directory (and parents) if it does not exist.

    Args:
        path: Directory path.
        mode: Permission bits for newly created directories.

    Returns:
        The ``Path`` object.
    """
    dir_path = Path(path)
    dir_path.mkdir(mode=mode, parents=True, exist_ok=True)
    return dir_path


# ---------------------------------------------------------------------------
# String helpers
# ---------------------------------------------------------------------------

_IRREGULAR_PLURALS: dict[str, str] = {
    "child": "children",
    "person": "people",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "goose": "geese",
    "foot": "feet",
    "tooth": "teeth",
    "ox": "oxen",
}

_UNCOUNTABLE: frozenset[str] = frozenset({
    "equipment",
    "information",
    "rice",
    "money",
    "species",
    "series",
    "fish",
    "sheep",
    "news",
    "data",
})


def pluralize(word: str) -> str:
    """Return the English plural of *word*.

    Only the trailing word of a compound (``user-profile``, ``user_profile``)
    is inflected, and its leading capitalisation is preserved.

    Examples::

        pluralize("user")         -> "users"
        pluralize("category")     -> "categories"
        pluralize("box")          -> "boxes"
        pluralize("blog-person")  -> "blog-people"
    """
    if not word:
        return word

    match = re.match(r"^(.*?)([A-Za-z]+)$", word)
    if match is None:
        return word
    prefix, last = match.groups()
    lower = last.lower()

    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR_PLURALS:
        plural = _IRREGULAR_PLURALS[lower]
    elif lower.endswith("y") and not lower.endswith(("ay", "ey", "iy", "oy", "uy")):
        plural = lower[:-1] + "ies"
    elif lower.endswith(("s", "sh", "ch", "x", "z")):
        plural = lower + "es"
    elif lower.endswith("fe"):
        plural = lower[:-2] + "ves"
    elif lower.endswith("f") and not lower.endswith("ff"):
        plural = lower[:-1] + "ves"
    else:
        plural = lower + "s"

    if last.isupper() and len(last) > 1:
        plural = plural.upper()
    elif last[0].isupper():
        plural = plural[0].upper() + plural[1:]
    return prefix + plural


def parse_variables(items: Iterable[str] | None) -> dict[str, str]:
    """Parse ``KEY=VALUE`` (or ``KEY:VALUE``) command-line items into a dict.

    Later occurrences of the same key win.

    Example::

        parse_variables(["@author=Jane", "$license:MIT"])
        -> {"@author": "Jane", "$license": "MIT"}

    Raises:
        ValueError: If an item has no separator or an empty key.
    """
    result: dict[str, str] = {}
    if not items:
        return result

    for raw in items:
        s = str(raw).strip()
        if not s:
            continue
        # Allow quotes around the entire token
        if len(s) > 1 and s[0] == s[-1] and s[0] in ("'", '"'):
            s = s[1:-1]

        key: str | None = None
        value: str | None = None
        positions = [p for p in (s.find("="), s.find(":")) if p > 0]
        if positions:
            cut = min(positions)
            key, value = s[:cut].strip(), s[cut + 1:].strip()
        if not key or value is None:
            raise ValueError(f"Invalid variable {raw!r}: expected KEY=VALUE or KEY:VALUE")
        result[key] = value

    return result


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------

ACTION_COLORS: dict[str, str] = {
    "init": "cyan",
    "create": "green",
    "overwrite": "yellow",
    "append": "green",
    "skip": "dim",
    "destroy": "red",
    "amend": "magenta",
    "unchanged": "dim",
    "failed": "bold red",
}


def print_action(action: str, target: str | Path, note: str = "") -> None:
    """Print one file-system action line, e.g. ``  create src/app.py``.

    Args:
        action: Verb shown in the first column (see ``ACTION_COLORS``).
        target: Path the action applies to.
        note: Optional trailing remark shown in parentheses.
    """
    color = ACTION_COLORS.get(action, "white")
    suffix = f" [dim]({note})[/dim]" if note else ""
    console.print(f"  [{color}]{action:>9}[/{color}] {escape(str(target))}{suffix}", highlight=False)


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
