from urllib.parse import urlsplit

import pytest

from talosfactory.registry import (
    BLOBS,
    MANIFESTS,
    InvalidImageError,
    RequestedImage,
    build_key,
    installer_repository,
    is_passthrough_tag,
    redirect_location,
    requested_image,
)

SCHEMATIC = "376567988ad370138ad8b2698212367b8edcb69b5fd68c80be1f2ec7d603b4ba"


@pytest.mark.parametrize("name,secureboot", [("installer", False), ("installer-secureboot", True)])
def test_requested_image_round_trip(name, secureboot):
    image = requested_image(name)
    assert image.secureboot is secureboot
    assert image.name() == name


def test_requested_image_rejects_other_names():
    with pytest.raises(InvalidImageError, match="invalid image: imager"):
        requested_image("imager")


def test_default_requested_image_is_plain_installer():
    assert RequestedImage().name() == requested_image("installer").name()


@pytest.mark.parametrize(
    "tag,expected",
    [
        ("sha256:abcdef", True),
        ("latest", True),
        ("1.7.0", True),
        ("v1.7.0", False),
        ("v1.8.0-alpha.1", False),
    ],
)
def test_is_passthrough_tag(tag, expected):
    assert is_passthrough_tag(tag) is expected


def test_manifest_redirect():
    location = redirect_location("https", "ghcr.io", "siderolabs", "installer", SCHEMATIC, MANIFESTS, "v1.7.0")
    assert location == f"https://ghcr.io/v2/siderolabs/installer/{SCHEMATIC}/manifests/v1.7.0"


def test_blob_redirect_keeps_digest_colon():
    digest = "sha256:" + "0" * 64
    location = redirect_location("https", "ghcr.io", "siderolabs", "installer-secureboot", SCHEMATIC, BLOBS, digest)
    parts = urlsplit(location)
    assert parts.scheme == "https"
    assert parts.netloc == "ghcr.io"
    assert parts.path.split("/")[1:] == ["v2", "siderolabs", "installer-secureboot", SCHEMATIC, "blobs", digest]


def test_redirect_with_nested_repository_and_insecure_scheme():
    location = redirect_location("http", "127.0.0.1:5000", "org/team", "installer", SCHEMATIC, MANIFESTS, "v1.6.0")
    parts = urlsplit(location)
    assert parts.scheme == "http"
    assert parts.netloc == "127.0.0.1:5000"
    assert parts.path.split("/")[1:4] == ["v2", "org", "team"]


def test_redirect_skips_empty_repository():
    location = redirect_location("https", "ghcr.io", "", "installer", SCHEMATIC, MANIFESTS, "v1.7.0")
    assert urlsplit(location).path.split("/")[1:3] == ["v2", "installer"]


def test_installer_repository():
    repo = installer_repository("ghcr.io/siderolabs", "installer", SCHEMATIC)
    assert repo.split("/") == ["ghcr.io", "siderolabs", "installer", SCHEMATIC]


def test_build_key():
    assert build_key("installer", SCHEMATIC, "v1.7.0") == f"installer-{SCHEMATIC}-v1.7.0"


def test_build_key_distinguishes_images():
    assert build_key("installer", SCHEMATIC, "v1.7.0") != build_key("installer-secureboot", SCHEMATIC, "v1.7.0")
    assert build_key("installer", SCHEMATIC, "v1.7.0").startswith("installer-")