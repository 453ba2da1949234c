"""Built-in gallery of example curl commands.

The catalog lives in ``data/examples.yaml`` next to this module and is
loaded lazily with :func:`yaml.safe_load`. Each entry is validated into an
:class:`Example`; the mapping key is the name used on the command line
(``curlgen examples show stripe``).
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel

from curlgen.exceptions import ConfigError

CATALOG_PATH = Path(__file__).parent / "data" / "examples.yaml"

LEVELS = ("beginner", "intermediate", "advanced")


class Example(BaseModel):
    """One gallery entry."""

    name: str
    level: Literal["beginner", "intermediate", "advanced"]
    label: str
    description: str
    curl: str


@lru_cache(maxsize=1)
def load_examples() -> tuple[Example, ...]:
    """Load and validate the example catalog, in file order.

    Returns:
        Every :class:`Example` in the catalog.

    Raises:
        ConfigError: If the catalog file is missing or malformed.
    """
    try:
        raw = yaml.safe_load(CATALOG_PATH.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot load example catalog: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError("Example catalog must be a mapping of name to example")
    return tuple(Example(name=name, **entry) for name, entry in raw.items())


def get_example(name: str) -> Example:
    """Return the example called *name*.

    Raises:
        ConfigError: If no example has that name.
    """
    for example in load_examples():
        if example.name == name:
            return example
    available = ", ".join(e.name for e in load_examples())
    raise ConfigError(f"Unknown example '{name}'. Available: {available}")


def examples_by_level() -> dict[str, list[Example]]:
    """Group the catalog by difficulty level, beginner first."""
    grouped: dict[str, list[Example]] = {level: [] for level in LEVELS}
    for example in load_examples():
        grouped[example.level].append(example)
    return grouped
