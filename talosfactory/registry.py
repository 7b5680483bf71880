"""Naming and redirects of the installer images served through the registry API."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from urllib.parse import quote

INSTALLER = "installer"
INSTALLER_SECUREBOOT = "installer-secureboot"

BLOBS = "blobs"
MANIFESTS = "manifests"

_PATH_SAFE = "/$&+,:;=@"


class InvalidImageError(ValueError):
    """Raised when an image other than the installer images is requested."""


@dataclass(frozen=True)
class RequestedImage:
    """An installer image requested through the registry API."""

    secureboot: bool = False

    def name(self) -> str:
        """The image name as it appears in the registry path."""
        return INSTALLER_SECUREBOOT if self.secureboot else INSTALLER


def requested_image(name: str) -> RequestedImage:
    """Resolve an image name from the registry path."""
    if name == INSTALLER:
        return RequestedImage(secureboot=False)
    if name == INSTALLER_SECUREBOOT:
        return RequestedImage(secureboot=True)
    raise InvalidImageError(f"invalid image: {name}")


def is_passthrough_tag(tag: str) -> bool:
    """Whether a manifest reference is redirected as is rather than built.

    Digests and anything that does not look like a version tag pass through.
    """
    return tag.startswith("sha256:") or not tag.startswith("v")


def redirect_location(
    scheme: str,
    registry: str,
    repository: str,
    image_name: str,
    schematic_id: str,
    kind: str,
    ref: str,
) -> str:
    """Build the external registry URL of a blob or manifest.

    ``kind`` is ``blobs`` or ``manifests``; ``ref`` the digest or tag.
    """
    elements = [e for e in ("v2", repository, image_name, schematic_id, kind, ref) if e]
    path = posixpath.normpath("/" + "/".join(elements))
    if path.startswith("//"):
        path = "/" + path.lstrip("/")
    if ref.endswith("/") and not path.endswith("/"):
        path += "/"

    path = quote(path, safe=_PATH_SAFE)
    prefix = f"{scheme}://" if scheme else "//"
    return f"{prefix}{registry}{path}"


def installer_repository(repository: str, image_name: str, schematic_id: str) -> str:
    """The internal repository holding an installer image for a schematic."""
    return "/".join((repository, image_name, schematic_id))


def build_key(image_name: str, schematic_id: str, version_tag: str) -> str:
    """The key under which concurrent builds of one installer image are merged."""
    return f"{image_name}-{schematic_id}-{version_tag}"