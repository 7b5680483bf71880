import pytest

from talosfactory.artifacts import Arch
from talosfactory.metadata import find_platform, find_sbc, platforms, sbcs
from talosfactory.versioning import parse


def test_platform_names_are_unique():
    names = [p.name for p in platforms()]
    assert len(names) == len(set(names))


def test_sbc_names_are_unique():
    names = [b.name for b in sbcs()]
    assert len(names) == len(set(names))


def test_metal_is_not_listed():
    assert find_platform("metal") is None


def test_find_platform_aws():
    aws = find_platform("aws")
    assert aws.label == "Amazon Web Services (AWS)"
    assert aws.disk_image_suffix == "raw.xz"
    assert aws.architectures == (Arch.AMD64, Arch.ARM64)
    assert aws.min_version is None


def test_digital_ocean_is_amd64_only():
    assert find_platform("digital-ocean").architectures == (Arch.AMD64,)


def test_akamai_min_version():
    assert find_platform("akamai").min_version == parse("1.7.0")


@pytest.mark.parametrize(
    "name, expected",
    [("aws", False), ("gcp", False), ("openstack", True), ("vultr", True), ("equinixMetal", True)],
)
def test_not_only_disk_image(name, expected):
    assert find_platform(name).not_only_disk_image() is expected


def test_every_platform_has_architectures_and_boot_methods():
    for platform in platforms():
        assert platform.architectures
        assert platform.boot_methods
        assert platform.documentation.startswith("/talos-guides/install/")


def test_find_sbc_nanopi_uses_legacy_board_name():
    board = find_sbc("nanopi_r4s")
    assert board.board_name == "rockpi_4"
    assert board.overlay_name == "nanopi-r4s"
    assert board.overlay_image == "siderolabs/sbc-rockchip"
    assert board.min_version == parse("1.3.0")


def test_overlay_only_boards_have_no_board_name():
    for name in ("orangepi_r1_plus_lts", "rock4cplus"):
        board = find_sbc(name)
        assert board.board_name == ""
        assert board.min_version == parse("1.7.0")


def test_every_sbc_has_overlay():
    for board in sbcs():
        assert board.overlay_name
        assert board.overlay_image.startswith("siderolabs/sbc-")


def test_find_unknown_returns_none():
    assert find_sbc("no-such-board") is None
    assert find_platform("no-such-platform") is None


def test_lists_are_fresh():
    first = platforms()
    first.clear()
    assert platforms()
    boards = sbcs()
    boards.pop()
    assert len(sbcs()) == len(boards) + 1