"""State and decisions of the step-by-step image wizard of the web UI."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Union

import yaml

from talosfactory.artifacts import Arch
from talosfactory.metadata import SBC, Platform, find_platform, find_sbc, platforms, sbcs
from talosfactory.versioning import Version, VersionError, parse_tolerant

TARGET_METAL = "metal"
TARGET_CLOUD = "cloud"
TARGET_SBC = "sbc"

PLATFORM_METAL = "metal"

DEFAULT_PLATFORM = "aws"
DEFAULT_BOARD = "rpi_generic"
DEFAULT_ARCH = Arch.AMD64.value

_SECURE_BOOT_MIN = Version(1, 5, 0)
_PRODUCTION_GUIDE_MIN = Version(1, 5, 0)
_TROUBLESHOOTING_GUIDE_MIN = Version(1, 6, 0)
_OVERLAY_MIN = (1, 7, 0)

FormValue = Union[str, Sequence[str]]


class WizardError(ValueError):
    """Raised when the wizard input cannot be turned into a schematic."""


class WizardStep(str, Enum):
    """The wizard steps, named after the templates that render them."""

    START = "wizard-start"
    VERSIONS = "wizard-versions"
    CLOUD = "wizard-cloud"
    SBC = "wizard-sbc"
    ARCH = "wizard-arch"
    EXTENSIONS = "wizard-extensions"
    CMDLINE = "wizard-cmdline"
    FINAL = "wizard-final"

    @property
    def template(self) -> str:
        """The template file rendering this step."""
        return self.value + ".html"


@dataclass
class WizardParams:
    """Wizard parameters; fields of steps not reached yet stay empty."""

    target: str = ""
    version: str = ""
    arch: str = ""
    platform: str = ""
    board: str = ""
    secure_boot: str = ""
    extensions: list[str] = field(default_factory=list)
    cmdline: str = ""
    cmdline_set: bool = False
    overlay_options: str = ""

    selected_target: str = ""
    selected_version: str = ""
    selected_arch: str = ""
    selected_platform: str = ""
    selected_board: str = ""
    selected_secure_boot: str = ""
    selected_extensions: list[str] = field(default_factory=list)
    selected_cmdline: str = ""
    selected_overlay_options: str = ""

    platform_meta: Optional[Platform] = None
    board_meta: Optional[SBC] = None

    def url_values(self) -> Optional[dict[str, list[str]]]:
        """The query values describing the wizard state, or None if there are none."""
        values: dict[str, list[str]] = {}

        for key, value in (
            ("target", self.target),
            ("version", self.version),
            ("arch", self.arch),
            ("platform", self.platform),
            ("board", self.board),
            ("secureboot", self.secure_boot),
        ):
            if value:
                values[key] = [value]

        if self.extensions:
            values["extensions"] = list(self.extensions)
        if self.cmdline:
            values["cmdline"] = [self.cmdline]
        if self.cmdline_set:
            values["cmdline-set"] = ["true"]
        if self.overlay_options:
            values["overlay-options"] = [self.overlay_options]

        return values or None


def _values(form: Mapping[str, FormValue], key: str) -> list[str]:
    value = form.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def _first(form: Mapping[str, FormValue], key: str) -> str:
    values = _values(form, key)
    return values[0] if values else ""


def params_from_form(form: Mapping[str, FormValue]) -> WizardParams:
    """Build the wizard parameters from submitted form or query values.

    Values may be single strings or lists of strings.
    """
    params = WizardParams(
        target=_first(form, "target"),
        version=_first(form, "version"),
        arch=_first(form, "arch"),
        platform=_first(form, "platform"),
        board=_first(form, "board"),
        secure_boot=_first(form, "secureboot"),
        extensions=_values(form, "extensions"),
        cmdline=_first(form, "cmdline").strip(),
        cmdline_set=_first(form, "cmdline-set") != "",
        overlay_options=_first(form, "overlay-options").strip(),
        selected_target=_first(form, "selected-target"),
        selected_version=_first(form, "selected-version"),
        selected_arch=_first(form, "selected-arch"),
        selected_platform=_first(form, "selected-platform"),
        selected_board=_first(form, "selected-board"),
        selected_secure_boot=_first(form, "selected-secureboot"),
        selected_extensions=_values(form, "selected-extensions"),
        selected_cmdline=_first(form, "selected-cmdline"),
        selected_overlay_options=_first(form, "selected-overlay-options"),
    )

    if params.target == TARGET_METAL:
        params.platform = PLATFORM_METAL
    elif params.target == TARGET_SBC:
        params.platform = PLATFORM_METAL
        if params.board:
            board = find_sbc(params.board)
            if board is not None:
                params.board_meta = board
            if not params.arch:
                if params.selected_arch:
                    # going back: reset the board choice
                    params.selected_board, params.board = params.board, ""
                else:
                    params.arch = Arch.ARM64.value
    elif params.target == TARGET_CLOUD and params.platform:
        platform = find_platform(params.platform)
        if platform is not None:
            params.platform_meta = platform
            if len(platform.architectures) == 1 and not params.arch:
                if params.selected_arch:
                    # going back: reset the platform choice
                    params.selected_platform, params.platform = params.platform, ""
                else:
                    params.arch = Arch(platform.architectures[0]).value

    return params


def next_step(params: WizardParams) -> tuple[WizardStep, WizardParams]:
    """Pick the step to show next, with the step's default selection filled in."""
    if not params.target:
        return WizardStep.START, replace(params, selected_target=params.selected_target or TARGET_METAL)
    if not params.version:
        return WizardStep.VERSIONS, params
    if params.target == TARGET_CLOUD and not params.platform:
        return WizardStep.CLOUD, replace(params, selected_platform=params.selected_platform or DEFAULT_PLATFORM)
    if params.target == TARGET_SBC and not params.board:
        return WizardStep.SBC, replace(params, selected_board=params.selected_board or DEFAULT_BOARD)
    if not params.arch:
        return WizardStep.ARCH, replace(params, selected_arch=params.selected_arch or DEFAULT_ARCH)
    if not params.extensions:
        return WizardStep.EXTENSIONS, params
    if not params.cmdline_set:
        return WizardStep.CMDLINE, params
    return WizardStep.FINAL, params


def _version_or_zero(text: str) -> Version:
    try:
        return parse_tolerant(text)
    except VersionError:
        return Version(0, 0, 0)


def _supports_overlay(text: str) -> bool:
    try:
        version = parse_tolerant(text)
    except VersionError:
        return True
    return (version.major, version.minor, version.patch) >= _OVERLAY_MIN


def platforms_for_version(version: str) -> list[Platform]:
    """The cloud platforms available for a Talos version."""
    talos = _version_or_zero(version)
    return [p for p in platforms() if p.min_version is None or talos >= p.min_version]


def sbcs_for_version(version: str) -> list[SBC]:
    """The single board computers available for a Talos version."""
    talos = _version_or_zero(version)
    return [b for b in sbcs() if b.min_version is None or talos >= b.min_version]


def secure_boot_supported(params: WizardParams) -> bool:
    """Whether Secure Boot may be offered for the chosen version and target."""
    if _version_or_zero(params.version) < _SECURE_BOOT_MIN:
        return False
    if params.target == TARGET_METAL:
        return True
    return params.platform_meta is not None and params.platform_meta.secure_boot_supported


def overlay_options_enabled(params: WizardParams) -> bool:
    """Whether overlay options can be entered for the chosen target and version."""
    return params.target == TARGET_SBC and _supports_overlay(params.version)


def troubleshooting_guide_available(params: WizardParams) -> bool:
    """Whether the chosen version has a troubleshooting guide."""
    return _version_or_zero(params.version) >= _TROUBLESHOOTING_GUIDE_MIN


def production_guide_available(params: WizardParams) -> bool:
    """Whether the chosen version has a production guide."""
    return _version_or_zero(params.version) >= _PRODUCTION_GUIDE_MIN


def _parse_overlay_options(text: str) -> Optional[dict[str, Any]]:
    try:
        parsed = yaml.safe_load(text) if text else None
    except yaml.YAMLError as exc:
        raise WizardError(f"error parsing overlay options: {exc}") from exc
    if parsed is None:
        return None
    if not isinstance(parsed, dict):
        raise WizardError("error parsing overlay options: expected a mapping")
    return parsed


def build_schematic(params: WizardParams) -> tuple[dict[str, Any], str]:
    """Build the schematic the wizard's choices describe.

    Returns the schematic document, with empty parts left out, and the legacy
    board suffix (``-<board>``) used by Talos versions without overlays.
    """
    extra_args = params.cmdline.split(" ") if params.cmdline else []
    extensions = sorted(ext for ext in params.extensions if ext != "-")

    overlay: dict[str, Any] = {}
    legacy_board = ""

    if params.target == TARGET_SBC:
        board = params.board_meta or SBC(name="")
        if _supports_overlay(params.version):
            options = _parse_overlay_options(params.overlay_options)
            if board.overlay_name:
                overlay["name"] = board.overlay_name
            if board.overlay_image:
                overlay["image"] = board.overlay_image
            if options:
                overlay["options"] = options
        else:
            legacy_board = "-" + board.board_name

    customization: dict[str, Any] = {}
    if extra_args:
        customization["extraKernelArgs"] = extra_args
    if extensions:
        customization["systemExtensions"] = {"officialExtensions": extensions}

    schematic: dict[str, Any] = {}
    if overlay:
        schematic["overlay"] = overlay
    if customization:
        schematic["customization"] = customization

    return schematic, legacy_board