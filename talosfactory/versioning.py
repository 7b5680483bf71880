"""Semantic versions and the selection of usable Talos releases."""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import Iterable, Union

PreReleasePart = Union[int, str]

_IDENT_CHARS = re.compile(r"[0-9A-Za-z-]+\Z")
_DIGITS = re.compile(r"[0-9]+\Z")

_ALLOWED_PRE_LABELS = ("alpha", "beta")


class VersionError(ValueError):
    """Raised when a version string cannot be parsed."""


def _compare_parts(a: PreReleasePart, b: PreReleasePart) -> int:
    a_num, b_num = isinstance(a, int), isinstance(b, int)
    if a_num and b_num:
        return (a > b) - (a < b)
    if a_num:
        return -1
    if b_num:
        return 1
    return (a > b) - (a < b)


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A semantic version; build metadata is kept but ignored in comparisons."""

    major: int
    minor: int
    patch: int
    pre: tuple[PreReleasePart, ...] = ()
    build: tuple[str, ...] = ()

    def compare(self, other: Version) -> int:
        """Return -1, 0 or 1 as this version is lower, equal or higher."""
        for mine, theirs in (
            (self.major, other.major),
            (self.minor, other.minor),
            (self.patch, other.patch),
        ):
            if mine != theirs:
                return 1 if mine > theirs else -1

        if not self.pre and not other.pre:
            return 0
        if not self.pre:
            return 1
        if not other.pre:
            return -1

        for mine, theirs in zip(self.pre, other.pre):
            result = _compare_parts(mine, theirs)
            if result:
                return result

        return (len(self.pre) > len(other.pre)) - (len(self.pre) < len(other.pre))

    def is_prerelease(self) -> bool:
        """Whether the version carries pre-release identifiers."""
        return bool(self.pre)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare(other) == 0

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare(other) < 0

    def __hash__(self) -> int:
        return hash((self.major, self.minor, self.patch, self.pre))

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            text += "-" + ".".join(str(part) for part in self.pre)
        if self.build:
            text += "+" + ".".join(self.build)
        return text


def _parse_number(label: str, value: str) -> int:
    if not _DIGITS.match(value):
        raise VersionError(f"invalid character(s) found in {label} number {value!r}")
    if len(value) > 1 and value.startswith("0"):
        raise VersionError(f"{label} number must not contain leading zeroes {value!r}")
    return int(value)


def _parse_pre_part(value: str) -> PreReleasePart:
    if not value:
        raise VersionError("prerelease is empty")
    if _DIGITS.match(value):
        if len(value) > 1 and value.startswith("0"):
            raise VersionError(f"numeric prerelease version must not contain leading zeroes {value!r}")
        return int(value)
    if not _IDENT_CHARS.match(value):
        raise VersionError(f"invalid character(s) found in prerelease {value!r}")
    return value


def _parse_build_part(value: str) -> str:
    if not value:
        raise VersionError("build meta data is empty")
    if not _IDENT_CHARS.match(value):
        raise VersionError(f"invalid character(s) found in build meta data {value!r}")
    return value


def parse(text: str) -> Version:
    """Parse a strict semantic version such as ``1.7.0-beta.1``."""
    if not text:
        raise VersionError("version string empty")

    parts = text.split(".", 2)
    if len(parts) != 3:
        raise VersionError("no major, minor and patch elements found")

    major = _parse_number("major", parts[0])
    minor = _parse_number("minor", parts[1])

    rest, _, build_text = parts[2].partition("+")
    build: tuple[str, ...] = ()
    if "+" in parts[2]:
        build = tuple(_parse_build_part(item) for item in build_text.split("."))

    patch_text, dash, pre_text = rest.partition("-")
    pre: tuple[PreReleasePart, ...] = ()
    if dash:
        pre = tuple(_parse_pre_part(item) for item in pre_text.split("."))

    patch = _parse_number("patch", patch_text)
    return Version(major, minor, patch, pre, build)


def parse_tolerant(text: str) -> Version:
    """Parse a version leniently: a leading ``v``, surrounding spaces, leading
    zeroes and missing minor/patch numbers are accepted."""
    text = text.strip()
    if text.startswith("v"):
        text = text[1:]

    parts = text.split(".", 2)
    cleaned = []
    for part in parts:
        if len(part) > 1:
            part = part.lstrip("0")
            if not part or not part[0].isdigit():
                part = "0" + part
        cleaned.append(part)

    if len(cleaned) < 3:
        if any(ch in cleaned[-1] for ch in "+-"):
            raise VersionError("short version cannot contain prerelease/build meta data")
        cleaned.extend(["0"] * (3 - len(cleaned)))

    return parse(".".join(cleaned))


def _acceptable(version: Version, newest: Version, min_version: Version) -> bool:
    if version < min_version:
        return False
    if not version.pre:
        return True
    if (version.major, version.minor) != (newest.major, newest.minor):
        return False
    if len(version.pre) != 2:
        return False
    label, number = version.pre
    return label in _ALLOWED_PRE_LABELS and isinstance(number, int)


def filter_talos_versions(candidates: Iterable[str], min_version: Version) -> list[Version]:
    """Select the Talos releases worth offering from a list of image tags.

    Unparseable tags and versions below ``min_version`` are dropped.
    Pre-releases are only kept for the newest minor release, and only in the
    ``alpha.N`` / ``beta.N`` form. The result is sorted ascending.
    """
    versions = []
    for candidate in candidates:
        try:
            versions.append(parse_tolerant(candidate))
        except VersionError:
            continue

    if not versions:
        return []

    newest = max(versions)
    return sorted(v for v in versions if _acceptable(v, newest, min_version))