"""Pieces of the image, PXE and metadata endpoints' responses."""

from __future__ import annotations

import posixpath
from typing import Iterable
from urllib.parse import quote, unquote, urlsplit, urlunsplit

from talosfactory.artifacts import ExtensionRef, OverlayRef
from talosfactory.versioning import Version, parse

_PATH_SAFE = "/$&+,:;=@~!*'()"


def normalize_version_tag(tag: str) -> tuple[str, Version]:
    """Return the tag with a leading ``v`` and the strictly parsed version."""
    if not tag.startswith("v"):
        tag = "v" + tag
    return tag, parse(tag[1:])


def version_labels(versions: Iterable[Version]) -> list[str]:
    """The ``v``-prefixed labels of versions, in the given order."""
    return ["v" + str(version) for version in versions]


def extension_info(ref: ExtensionRef) -> dict[str, str]:
    """The public description of an official extension."""
    return {
        "name": ref.tagged_reference.repository_str(),
        "ref": str(ref.tagged_reference),
        "digest": ref.digest,
        "author": ref.author,
        "description": ref.description,
    }


def overlay_info(ref: OverlayRef) -> dict[str, str]:
    """The public description of an official overlay."""
    return {
        "name": ref.name,
        "image": ref.tagged_reference.repository_str(),
        "ref": str(ref.tagged_reference),
        "digest": ref.digest,
    }


def _join_url(base_url: str, *elements: str) -> str:
    parts = urlsplit(base_url)
    joined = "/".join(e for e in (unquote(parts.path), *elements) if e)
    path = posixpath.normpath(joined) if joined else ""
    if path == ".":
        path = ""
    if path.startswith("//"):
        path = "/" + path.lstrip("/")
    if elements and elements[-1].endswith("/") and not path.endswith("/"):
        path += "/"
    if parts.netloc and path and not path.startswith("/"):
        path = "/" + path
    return urlunsplit((parts.scheme, parts.netloc, quote(path, safe=_PATH_SAFE), parts.query, parts.fragment))


def pxe_urls(base_url: str, schematic_id: str, version_tag: str, arch: str) -> tuple[str, str]:
    """The kernel and initramfs URLs a standard PXE script boots from."""
    kernel = _join_url(base_url, "image", schematic_id, version_tag, f"kernel-{arch}")
    initramfs = _join_url(base_url, "image", schematic_id, version_tag, f"initramfs-{arch}.xz")
    return kernel, initramfs


def secureboot_uki_url(base_url: str, schematic_id: str, version_tag: str, platform: str, arch: str) -> str:
    """The URL of the signed UKI a Secure Boot PXE script chains to."""
    return _join_url(base_url, "image", schematic_id, version_tag, f"{platform}-{arch}-secureboot.uki.efi")


def content_disposition(path: str) -> str:
    """The Content-Disposition header offering an asset as a download."""
    return f'attachment; filename="{path}"'