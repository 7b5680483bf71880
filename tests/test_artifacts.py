import io
import tarfile

import pytest

from talosfactory.artifacts import (
    DEFAULT_REGISTRY,
    DEFAULT_TAG,
    Arch,
    ArtifactsError,
    InvalidReferenceError,
    Kind,
    NotFoundError,
    extract_extension_list,
    extract_overlay_list,
    parse_tag,
)

DIGEST_A = "sha256:" + "a" * 64
DIGEST_B = "sha256:" + "b" * 64


def _tar(files):
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as archive:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            archive.addfile(info, io.BytesIO(content))
    buf.seek(0)
    return buf


def test_enum_values():
    assert Arch("arm64") is Arch.ARM64
    assert Kind("initramfs.xz") is Kind.INITRAMFS


def test_parse_tag_with_registry():
    ref = parse_tag("ghcr.io/siderolabs/gvisor:20231214.0-v1.7.0")
    assert ref.registry == "ghcr.io"
    assert ref.repository_str() == "siderolabs/gvisor"
    assert ref.tag == "20231214.0-v1.7.0"
    assert str(ref) == "ghcr.io/siderolabs/gvisor:20231214.0-v1.7.0"
    assert ref.name == "ghcr.io/siderolabs/gvisor:20231214.0-v1.7.0"


def test_parse_tag_defaults():
    ref = parse_tag("alpine")
    assert ref.registry == DEFAULT_REGISTRY
    assert ref.tag == DEFAULT_TAG
    assert ref.repository_str() == "library/alpine"


def test_parse_tag_registry_with_port():
    ref = parse_tag("localhost:5000/siderolabs/installer:v1.7.0")
    assert ref.registry == "localhost:5000"
    assert ref.repository_str() == "siderolabs/installer"
    assert ref.tag == "v1.7.0"


@pytest.mark.parametrize("text", ["ghcr.io/Siderolabs/x:v1", "ghcr.io/a/b:bad tag", "", "x"])
def test_parse_tag_invalid(text):
    with pytest.raises(InvalidReferenceError):
        parse_tag(text)


def test_extract_extension_list_with_descriptions():
    line_a = f"ghcr.io/siderolabs/gvisor:20231214.0-v1.7.0@{DIGEST_A}"
    line_b = f"ghcr.io/siderolabs/intel-ucode:20231114@{DIGEST_B}"
    digests = f"{line_a}\n  {line_b}  \nnot-a-reference\n".encode()
    descriptions = (
        f"{line_a}:\n  author: Sidero Labs\n  description: gVisor runtime\n"
    ).encode()

    stream = _tar({"descriptions.yaml": descriptions, "image-digests": digests})
    extensions = extract_extension_list(stream)

    assert [e.digest for e in extensions] == [DIGEST_A, DIGEST_B]
    assert [e.tagged_reference.repository_str() for e in extensions] == [
        "siderolabs/gvisor",
        "siderolabs/intel-ucode",
    ]
    assert extensions[0].author == "Sidero Labs"
    assert extensions[0].description == "gVisor runtime"
    assert extensions[1].author == ""
    assert extensions[1].description == ""


def test_extract_extension_list_descriptions_after_digests():
    line = f"ghcr.io/siderolabs/gvisor:v1@{DIGEST_A}"
    stream = _tar(
        {
            "image-digests": line.encode(),
            "descriptions.yaml": f"{line}:\n  author: someone\n".encode(),
        }
    )
    extensions = extract_extension_list(stream)
    assert extensions[0].author == "someone"


def test_extract_extension_list_missing_file():
    with pytest.raises(NotFoundError):
        extract_extension_list(_tar({"other": b"data"}))


def test_extract_extension_list_bad_reference():
    stream = _tar({"image-digests": f"ghcr.io/BAD/ref:v1@{DIGEST_A}".encode()})
    with pytest.raises(ArtifactsError):
        extract_extension_list(stream)


def test_extract_extension_list_bad_yaml():
    stream = _tar(
        {
            "descriptions.yaml": b"key: [unclosed",
            "image-digests": f"ghcr.io/siderolabs/gvisor:v1@{DIGEST_A}".encode(),
        }
    )
    with pytest.raises(ArtifactsError):
        extract_extension_list(stream)


def test_extract_extension_list_corrupt_stream():
    with pytest.raises(ArtifactsError):
        extract_extension_list(io.BytesIO(b"this is not a tar archive" * 40))


def test_extract_overlay_list():
    document = (
        "overlays:\n"
        "  - name: rpi_generic\n"
        "    image: ghcr.io/siderolabs/sbc-raspberrypi:v0.1.0\n"
        f"    digest: {DIGEST_A}\n"
        "  - name: rock64\n"
        "    image: ghcr.io/siderolabs/sbc-rockchip:v0.1.0\n"
        f"    digest: {DIGEST_B}\n"
    ).encode()
    overlays = extract_overlay_list(_tar({"overlays.yaml": document}))

    assert [o.name for o in overlays] == ["rpi_generic", "rock64"]
    assert [o.digest for o in overlays] == [DIGEST_A, DIGEST_B]
    assert overlays[0].tagged_reference.repository_str() == "siderolabs/sbc-raspberrypi"
    assert str(overlays[1].tagged_reference) == "ghcr.io/siderolabs/sbc-rockchip:v0.1.0"


def test_extract_overlay_list_missing_file():
    with pytest.raises(NotFoundError):
        extract_overlay_list(_tar({"image-digests": b""}))


def test_extract_overlay_list_empty_overlays():
    with pytest.raises(NotFoundError):
        extract_overlay_list(_tar({"overlays.yaml": b"overlays: []\n"}))