"""Helpers for the pages of the web UI: version lists, filters and template functions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from talosfactory.artifacts import ExtensionRef
from talosfactory.versioning import Version, VersionError, parse_tolerant


@dataclass(frozen=True)
class VersionGroup:
    """Talos versions sharing one minor release (stable or pre-release)."""

    label: str
    versions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class VersionList:
    """The versions offered in the version picker."""

    default_version: str
    latest_stable: str
    groups: list[VersionGroup] = field(default_factory=list)


def _group_label(version: Version) -> str:
    if version.pre:
        return f"{version.major}.{version.minor}-pre"
    return f"{version.major}.{version.minor}"


def _label_key(label: str) -> Version:
    try:
        return parse_tolerant(label)
    except VersionError:
        return Version(0, 0, 0)


def group_versions(versions: Iterable[Version], selected_version: str = "") -> VersionList:
    """Group ascending Talos versions by minor release, newest group first.

    The default selection is ``selected_version`` or else the latest stable
    release.
    """
    newest_first = list(versions)[::-1]

    latest_stable = next((v for v in newest_first if not v.pre), Version(0, 0, 0))
    default = selected_version or str(latest_stable)

    groups: dict[str, list[Version]] = {}
    for version in newest_first:
        groups.setdefault(_group_label(version), []).append(version)

    labels = sorted(groups, key=_label_key, reverse=True)

    return VersionList(
        default_version=default,
        latest_stable=str(latest_stable),
        groups=[VersionGroup(label=label, versions=[str(v) for v in groups[label]]) for label in labels],
    )


def short_version(text: str) -> str:
    """Shorten a version to ``vMAJOR.MINOR``; unparseable text is returned as is."""
    try:
        version = parse_tolerant(text)
    except VersionError:
        return text
    return f"v{version.major}.{version.minor}"


def make_dict(*args: Any) -> dict[str, Any]:
    """Build a mapping from alternating keys and values."""
    if len(args) % 2:
        raise ValueError("invalid dict call")

    result: dict[str, Any] = {}
    for key, value in zip(args[::2], args[1::2]):
        if not isinstance(key, str):
            raise TypeError("dict keys must be strings")
        result[key] = value
    return result


def filter_extensions(
    extensions: Iterable[ExtensionRef],
    search: str,
    selected: Sequence[str] = (),
) -> list[ExtensionRef]:
    """Filter extensions by a case-insensitive search of reference and description.

    Selected extensions (by repository) are always kept; an empty search keeps all.
    """
    extensions = list(extensions)
    if not search:
        return extensions

    needle = search.lower()
    chosen = set(selected)

    return [
        ext
        for ext in extensions
        if ext.tagged_reference.repository_str() in chosen
        or needle in str(ext.tagged_reference).lower()
        or needle in ext.description.lower()
    ]