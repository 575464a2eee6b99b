"""Reading and rewriting dependency entries in a Cargo manifest document.

Entries in ``[dependencies]`` are either a bare requirement string
(``serde = "1.0"``) or a table with a ``version`` key
(``serde = { version = "1.0", features = ["derive"] }``). Before any trial
a bare string is normalized into an inline table so every later write
targets the ``version`` key and other keys are preserved verbatim.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any

import tomlkit
from tomlkit import TOMLDocument

from cargobounds.core.semver import VersionReq
from cargobounds.models.versioning import Version

DEPENDENCIES = "dependencies"


class ManifestStructureError(ValueError):
    """Raised when the manifest's dependency section is malformed."""


class DependencyNotFoundError(LookupError):
    """Raised when a requested dependency is not declared in the manifest."""


def dependency_table(document: TOMLDocument) -> MutableMapping[str, Any]:
    """Return the ``[dependencies]`` table.

    Raises ``ManifestStructureError`` if the section is missing or is not a
    table.
    """
    table = document.get(DEPENDENCIES)
    if table is None:
        raise ManifestStructureError(f"[{DEPENDENCIES}] is missing")
    if not isinstance(table, MutableMapping):
        raise ManifestStructureError(f"[{DEPENDENCIES}] is not a table")
    return table


def dependency_names(document: TOMLDocument) -> list[str]:
    """Declared dependency names, in manifest order."""
    return list(dependency_table(document).keys())


def _entry(document: TOMLDocument, name: str) -> Any:
    table = dependency_table(document)
    if name not in table:
        raise DependencyNotFoundError(f"dependency {name!r} not found")
    return table[name]


def declared_bound(document: TOMLDocument, name: str) -> str:
    """Return the requirement text declared for *name*."""
    entry = _entry(document, name)
    if isinstance(entry, str):
        return str(entry)
    if not isinstance(entry, MutableMapping):
        raise ManifestStructureError(
            f"dependency {name!r} is neither a version string nor a table"
        )
    version = entry.get("version")
    if version is None:
        raise ManifestStructureError(f"dependency {name!r} has no 'version' key")
    if not isinstance(version, str):
        raise ManifestStructureError(f"dependency {name!r} 'version' is not a string")
    return str(version)


def normalize_dependency(document: TOMLDocument, name: str) -> VersionReq:
    """Convert *name*'s entry to table form and return its parsed bound.

    Applied once per dependency, before its first trial.
    """
    text = declared_bound(document, name)
    entry = _entry(document, name)
    if isinstance(entry, str):
        inline = tomlkit.inline_table()
        inline["version"] = text
        dependency_table(document)[name] = inline
    return VersionReq.parse(text)


def pin_version(document: TOMLDocument, name: str, version: Version) -> None:
    """Set *name*'s ``version`` key to an exact pin on *version*."""
    entry = _entry(document, name)
    if not isinstance(entry, MutableMapping):
        raise ManifestStructureError(
            f"dependency {name!r} must be normalized before it is pinned"
        )
    entry["version"] = f"={version}"
