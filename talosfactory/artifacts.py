"""Artifact kinds, image references and release manifests of Talos images."""

from __future__ import annotations

import io
import tarfile
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import IO, Any
from urllib.parse import urlsplit

import yaml


class Arch(str, Enum):
    """Supported artifact architectures."""

    AMD64 = "amd64"
    ARM64 = "arm64"


class Kind(str, Enum):
    """Supported artifact kinds."""

    KERNEL = "vmlinuz"
    INITRAMFS = "initramfs.xz"
    SYSTEMD_BOOT = "systemd-boot.efi"
    SYSTEMD_STUB = "systemd-stub.efi"
    DTB = "dtb"
    UBOOT = "u-boot"
    RPI_FIRMWARE = "raspberrypi-firmware"


FETCH_TIMEOUT = timedelta(minutes=20)

INSTALLER_IMAGE = "siderolabs/installer"
IMAGER_IMAGE = "siderolabs/imager"
EXTENSION_MANIFEST_IMAGE = "siderolabs/extensions"
OVERLAY_MANIFEST_IMAGE = "siderolabs/overlays"

TMP_SUFFIX = "-tmp"

DEFAULT_REGISTRY = "index.docker.io"
DEFAULT_TAG = "latest"

_REPOSITORY_CHARS = frozenset("abcdefghijklmnopqrstuvwxyz0123456789_-./")
_TAG_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-.")


class ArtifactsError(Exception):
    """Raised when artifact data cannot be read."""


class NotFoundError(ArtifactsError):
    """Raised when a requested artifact does not exist."""


class InvalidReferenceError(ValueError):
    """Raised when an image reference is malformed."""


def _check_element(label: str, value: str, allowed: frozenset, min_len: int, max_len: int) -> None:
    if not min_len <= len(value) <= max_len:
        raise InvalidReferenceError(
            f"{label} must be between {min_len} and {max_len} characters in length: {value}"
        )
    bad = set(value) - allowed
    if bad:
        raise InvalidReferenceError(
            f"{label} can only contain the characters {''.join(sorted(allowed))!r}: {value}"
        )


@dataclass(frozen=True)
class ImageTag:
    """A tagged image reference such as ``ghcr.io/siderolabs/gvisor:v1``."""

    registry: str
    repository: str
    tag: str
    original: str

    def repository_str(self) -> str:
        """The repository path, with the implicit ``library/`` namespace added."""
        if self.registry == DEFAULT_REGISTRY and "/" not in self.repository:
            return "library/" + self.repository
        return self.repository

    @property
    def name(self) -> str:
        """The fully qualified reference."""
        return f"{self.registry}/{self.repository_str()}:{self.tag}"

    def __str__(self) -> str:
        return self.original


def parse_tag(ref: str) -> ImageTag:
    """Parse a tagged image reference, filling in the default registry and tag."""
    base, tag = ref, ""
    parts = ref.split(":")
    if len(parts) > 1 and "/" not in parts[-1]:
        base, tag = ":".join(parts[:-1]), parts[-1]

    if tag:
        _check_element("tag", tag, _TAG_CHARS, 1, 128)
    else:
        tag = DEFAULT_TAG

    if not base:
        raise InvalidReferenceError("a repository name must be specified")

    registry, repository = "", base
    head, sep, tail = base.partition("/")
    if sep and ("." in head or ":" in head):
        registry, repository = head, tail

    _check_element("repository", repository, _REPOSITORY_CHARS, 2, 255)

    if registry == "docker.io":
        registry = DEFAULT_REGISTRY
    if registry:
        if urlsplit("//" + registry).netloc != registry:
            raise InvalidReferenceError(f"registries must be valid RFC 3986 URI authorities: {registry}")
    else:
        registry = DEFAULT_REGISTRY

    return ImageTag(registry=registry, repository=repository, tag=tag, original=ref)


@dataclass
class ExtensionRef:
    """An extension image published for some Talos version."""

    tagged_reference: ImageTag
    digest: str
    description: str = ""
    author: str = ""
    _image_digest: str = field(default="", repr=False, compare=False)


@dataclass
class OverlayRef:
    """An overlay image published for some Talos version."""

    name: str
    tagged_reference: ImageTag
    digest: str


def _load_yaml_document(data: bytes, filename: str) -> Any:
    try:
        documents = yaml.safe_load_all(io.BytesIO(data))
        return next(iter(documents))
    except StopIteration:
        raise ArtifactsError(f"error reading {filename} file: empty document") from None
    except yaml.YAMLError as exc:
        raise ArtifactsError(f"error reading {filename} file: {exc}") from exc


def _tar_files(stream: IO[bytes]):
    """Yield (name, content) for every regular file of a tar stream."""
    try:
        with tarfile.open(fileobj=stream, mode="r|") as archive:
            for member in archive:
                if not member.isfile():
                    continue
                handle = archive.extractfile(member)
                if handle is None:
                    continue
                yield member.name, handle.read()
    except tarfile.TarError as exc:
        raise ArtifactsError(f"error reading tar header: {exc}") from exc


def _parse_descriptions(document: Any) -> dict[str, tuple[str, str]]:
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ArtifactsError("error reading descriptions.yaml file: expected a mapping")

    descriptions = {}
    for key, entry in document.items():
        entry = entry or {}
        if not isinstance(entry, dict):
            raise ArtifactsError("error reading descriptions.yaml file: expected a mapping entry")
        descriptions[str(key)] = (str(entry.get("author") or ""), str(entry.get("description") or ""))
    return descriptions


def _parse_image_digests(data: bytes) -> list[ExtensionRef]:
    extensions = []
    for raw in data.decode("utf-8").splitlines():
        line = raw.strip()
        tagged, sep, digest = line.partition("@")
        if not sep:
            continue
        try:
            tagged_ref = parse_tag(tagged)
        except InvalidReferenceError as exc:
            raise ArtifactsError(f"failed to parse tagged reference {tagged}: {exc}") from exc
        extensions.append(ExtensionRef(tagged_reference=tagged_ref, digest=digest, _image_digest=line))
    return extensions


def extract_extension_list(stream: IO[bytes]) -> list[ExtensionRef]:
    """Read the extension list from the exported extensions manifest image."""
    extensions: list[ExtensionRef] = []
    descriptions: dict[str, tuple[str, str]] = {}

    for name, content in _tar_files(stream):
        if name == "descriptions.yaml":
            descriptions = _parse_descriptions(_load_yaml_document(content, name))
        elif name == "image-digests":
            extensions.extend(_parse_image_digests(content))

    if not extensions:
        raise NotFoundError("failed to find image-digests file")

    for extension in extensions:
        found = descriptions.get(extension._image_digest)
        if found is not None:
            extension.author, extension.description = found

    return extensions


def _parse_overlays(document: Any) -> list[OverlayRef]:
    if document is None:
        return []
    if not isinstance(document, dict):
        raise ArtifactsError("error reading overlays.yaml file: expected a mapping")

    overlays = []
    for entry in document.get("overlays") or []:
        if not isinstance(entry, dict):
            raise ArtifactsError("error reading overlays.yaml file: expected a mapping entry")
        image = str(entry.get("image") or "")
        try:
            tagged_ref = parse_tag(image)
        except InvalidReferenceError as exc:
            raise ArtifactsError(f"failed to parse tagged reference {image}: {exc}") from exc
        overlays.append(
            OverlayRef(
                name=str(entry.get("name") or ""),
                tagged_reference=tagged_ref,
                digest=str(entry.get("digest") or ""),
            )
        )
    return overlays


def extract_overlay_list(stream: IO[bytes]) -> list[OverlayRef]:
    """Read the overlay list from the exported overlays manifest image."""
    overlays: list[OverlayRef] = []

    for name, content in _tar_files(stream):
        if name == "overlays.yaml":
            overlays.extend(_parse_overlays(_load_yaml_document(content, name)))

    if not overlays:
        raise NotFoundError("failed to find overlays.yaml file")

    return overlays