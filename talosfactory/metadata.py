"""Metadata about the cloud platforms and single board computers Talos supports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from talosfactory.artifacts import Arch
from talosfactory.versioning import Version, parse


@dataclass(frozen=True)
class Platform:
    """A platform supported by Talos."""

    name: str
    label: str = ""
    description: str = ""
    min_version: Optional[Version] = None
    architectures: tuple[Arch, ...] = ()
    documentation: str = ""
    disk_image_suffix: str = ""
    boot_methods: tuple[str, ...] = ()
    secure_boot_supported: bool = False

    def not_only_disk_image(self) -> bool:
        """Whether the platform can boot by methods other than a disk image."""
        return self.boot_methods != ("disk-image",)


@dataclass(frozen=True)
class SBC:
    """A single board computer configuration.

    ``board_name`` applies to Talos before 1.7, the overlay fields to 1.7 and later.
    """

    name: str
    board_name: str = ""
    overlay_name: str = ""
    overlay_image: str = ""
    label: str = ""
    documentation: str = ""
    min_version: Optional[Version] = None


_BOTH = (Arch.AMD64, Arch.ARM64)
_AMD64 = (Arch.AMD64,)


def platforms() -> list[Platform]:
    """Return the supported platforms; the metal platform is handled separately."""
    return [
        # Tier 1
        Platform(
            name="aws",
            label="Amazon Web Services (AWS)",
            description="Runs on AWS VMs booted from an AMI",
            architectures=_BOTH,
            documentation="/talos-guides/install/cloud-platforms/aws/",
            disk_image_suffix="raw.xz",
            boot_methods=("disk-image",),
        ),
        Platform(
            name="gcp",
            label="Google Cloud (GCP)",
            description="Runs on Google Cloud VMs booted from a disk image",
            architectures=_BOTH,
            documentation="/talos-guides/install/cloud-platforms/gcp/",
            disk_image_suffix="raw.tar.gz",
            boot_methods=("disk-image",),
        ),
        Platform(
            name="equinixMetal",
            label="Equinix Metal",
            description="Runs on Equinix Metal bare-metal servers",
            architectures=_BOTH,
            documentation="/talos-guides/install/bare-metal-platforms/equinix-metal/",
            boot_methods=("pxe",),
        ),
        # Tier 2
        Platform(
            name="azure",
            label="Microsoft Azure",
            description="Runs on Microsoft Azure Linux Virtual Machines",
            architectures=_BOTH,
            documentation="/talos-guides/install/cloud-platforms/azure/",
            disk_image_suffix="vhd.xz",
            boot_methods=("disk-image",),
        ),
        Platform(
            name="digital-ocean",
            label="Digital Ocean",
            description="Runs on Digital Ocean droplets",
            architectures=_AMD64,
            documentation="/talos-guides/install/cloud-platforms/digitalocean/",
            disk_image_suffix="raw.gz",
            boot_methods=("disk-image",),
        ),
        Platform(
            name="openstack",
            label="OpenStack",
            description="Runs on OpenStack virtual machines",
            architectures=_BOTH,
            documentation="/talos-guides/install/cloud-platforms/openstack/",
            disk_image_suffix="raw.xz",
            boot_methods=("disk-image", "iso", "pxe"),
        ),
        Platform(
            name="vmware",
            label="VMWare",
            description="Runs on VMWare ESXi virtual machines",
            architectures=_AMD64,
            documentation="/talos-guides/install/virtualized-platforms/vmware/",
            disk_image_suffix="ova",
            boot_methods=("disk-image", "iso"),
        ),
        # Tier 3
        Platform(
            name="akamai",
            label="Akamai",
            description="Runs on Akamai Cloud (Linode) virtual machines",
            architectures=_AMD64,
            min_version=parse("1.7.0"),
            documentation="/talos-guides/install/cloud-platforms/akamai/",
            disk_image_suffix="raw.gz",
            boot_methods=("disk-image",),
        ),
        Platform(
            name="hcloud",
            label="Hetzner",
            description="Runs on Hetzner virtual machines",
            architectures=_AMD64,
            documentation="/talos-guides/install/cloud-platforms/hetzner/",
            disk_image_suffix="raw.xz",
            boot_methods=("disk-image",),
        ),
        Platform(
            name="nocloud",
            label="Nocloud",
            description=(
                "Runs on various hypervisors supporting 'nocloud' metadata "
                "(Proxmox, Oxide Computer, etc.)"
            ),
            architectures=_BOTH,
            documentation="/talos-guides/install/cloud-platforms/nocloud/",
            disk_image_suffix="raw.xz",
            boot_methods=("disk-image", "iso", "pxe"),
        ),
        Platform(
            name="oracle",
            label="Oracle Cloud",
            description="Runs on Oracle Cloud virtual machines",
            architectures=_BOTH,
            documentation="/talos-guides/install/cloud-platforms/oracle/",
            disk_image_suffix="raw.xz",
            boot_methods=("disk-image",),
        ),
        Platform(
            name="upcloud",
            label="UpCloud",
            description="Runs on UpCloud virtual machines",
            architectures=_AMD64,
            documentation="/talos-guides/install/cloud-platforms/ucloud/",
            disk_image_suffix="raw.xz",
            boot_methods=("disk-image",),
        ),
        Platform(
            name="vultr",
            label="Vultr",
            description="Runs on Vultr Cloud Compute virtual machines",
            architectures=_AMD64,
            documentation="/talos-guides/install/cloud-platforms/vultr/",
            boot_methods=("iso", "pxe"),
        ),
    ]


def sbcs() -> list[SBC]:
    """Return the supported single board computers."""
    return [
        SBC(
            name="rpi_generic",
            board_name="rpi_generic",
            overlay_name="rpi_generic",
            overlay_image="siderolabs/sbc-raspberrypi",
            label="Raspberry Pi Series",
            documentation="/talos-guides/install/single-board-computers/rpi_generic/",
        ),
        SBC(
            name="bananapi_m64",
            board_name="bananapi_m64",
            overlay_name="bananapi_m64",
            overlay_image="siderolabs/sbc-allwinner",
            label="Banana Pi M64",
            documentation="/talos-guides/install/single-board-computers/bananapi_m64/",
        ),
        SBC(
            name="nanopi_r4s",
            board_name="rockpi_4",
            overlay_name="nanopi-r4s",
            overlay_image="siderolabs/sbc-rockchip",
            label="Friendlyelec Nano PI R4S",
            documentation="/talos-guides/install/single-board-computers/nanopi_r4s/",
            min_version=parse("1.3.0"),
        ),
        SBC(
            name="jetson_nano",
            board_name="jetson_nano",
            overlay_name="jetson_nano",
            overlay_image="siderolabs/sbc-jetson",
            label="Jetson Nano",
            documentation="/talos-guides/install/single-board-computers/jetson_nano/",
        ),
        SBC(
            name="libretech_all_h3_cc_h5",
            board_name="libretech_all_h3_cc_h5",
            overlay_name="libretech_all_h3_cc_h5",
            overlay_image="siderolabs/sbc-allwinner",
            label="Libre Computer Board ALL-H3-CC",
            documentation="/talos-guides/install/single-board-computers/libretech_all_h3_cc_h5/",
        ),
        SBC(
            name="orangepi_r1_plus_lts",
            overlay_name="orangepi-r1-plus-lts",
            overlay_image="siderolabs/sbc-rockchip",
            label="Orange Pi R1 Plus LTS",
            documentation="/talos-guides/install/single-board-computers/orangepi_r1_plus_lts/",
            min_version=parse("1.7.0"),
        ),
        SBC(
            name="pine64",
            board_name="pine64",
            overlay_name="pine64",
            overlay_image="siderolabs/sbc-allwinner",
            label="Pine64",
            documentation="/talos-guides/install/single-board-computers/pine64/",
        ),
        SBC(
            name="rock64",
            board_name="rock64",
            overlay_name="rock64",
            overlay_image="siderolabs/sbc-rockchip",
            label="Pine64 Rock64",
            documentation="/talos-guides/install/single-board-computers/rock64/",
        ),
        SBC(
            name="rock4cplus",
            overlay_name="rock4cplus",
            overlay_image="siderolabs/sbc-rockchip",
            label="Radxa ROCK 4C Plus",
            documentation="/talos-guides/install/single-board-computers/rock4cplus/",
            min_version=parse("1.7.0"),
        ),
        SBC(
            name="rockpi_4",
            board_name="rockpi_4",
            overlay_name="rockpi4",
            overlay_image="siderolabs/sbc-rockchip",
            label="Radxa ROCK PI 4",
            documentation="/talos-guides/install/single-board-computers/rockpi_4/",
        ),
        SBC(
            name="rockpi_4c",
            board_name="rockpi_4c",
            overlay_name="rockpi4c",
            overlay_image="siderolabs/sbc-rockchip",
            label="Radxa ROCK PI 4",
            documentation="/talos-guides/install/single-board-computers/rockpi_4c/",
        ),
    ]


def find_platform(name: str) -> Optional[Platform]:
    """Return the platform called ``name``, or None if there is none."""
    return next((platform for platform in platforms() if platform.name == name), None)


def find_sbc(name: str) -> Optional[SBC]:
    """Return the board called ``name``, or None if there is none."""
    return next((board for board in sbcs() if board.name == name), None)