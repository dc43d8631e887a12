"""Catalog document locations.

A catalog is looked up in priority order and the first location holding a
readable file wins:

1. the ``vmproducts`` custom property of the provider context;
2. the ``dasein.vmproducts.<implementation>`` system property;
3. ``vmproducts.json`` shipped inside the backend's own package;
4. ``data/<implementation>/vmproducts.json`` bundled with this package;
5. the standard document ``data/vmproducts.json``.
"""

from __future__ import annotations

from importlib.resources import files
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Mapping, NamedTuple

from vmkit.base.config import ProviderContext
from vmkit.base.exceptions import CatalogConfigurationError

CATALOG_FILENAME = "vmproducts.json"
SYSTEM_PROPERTY_PREFIX = "dasein.vmproducts."


class CatalogLocation(NamedTuple):
    source: str
    path: Traversable


def _data_dir() -> Traversable:
    return files("vmkit.catalog") / "data"


def _package_dir(package: str) -> Traversable | None:
    try:
        return files(package)
    except (ModuleNotFoundError, TypeError):
        return None


def candidate_locations(
    context: ProviderContext,
    implementation: str | None,
    properties: Mapping[str, str],
    package: str | None = None,
) -> list[CatalogLocation]:
    """Return every place the catalog may live, highest priority first."""
    candidates: list[CatalogLocation] = []
    if context.catalog_override:
        candidates.append(
            CatalogLocation("context", Path(context.catalog_override).expanduser())
        )
    if implementation:
        value = properties.get(SYSTEM_PROPERTY_PREFIX + implementation)
        if value:
            candidates.append(CatalogLocation("property", Path(value).expanduser()))
    if package:
        package_dir = _package_dir(package)
        if package_dir is not None:
            candidates.append(CatalogLocation("backend", package_dir / CATALOG_FILENAME))
    if implementation:
        candidates.append(
            CatalogLocation("bundled", _data_dir() / implementation / CATALOG_FILENAME)
        )
    candidates.append(CatalogLocation("standard", _data_dir() / CATALOG_FILENAME))
    return candidates


def read_first(candidates: list[CatalogLocation]) -> tuple[CatalogLocation, str] | None:
    """Read the first candidate that exists.

    Returns:
        The winning location and its text, or None if no candidate exists.

    Raises:
        CatalogConfigurationError: If an existing document cannot be read.
    """
    for location in candidates:
        try:
            if not location.path.is_file():
                continue
            return location, location.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CatalogConfigurationError(
                f"Failed to read catalog document '{location.path}'"
            ) from e
    return None
