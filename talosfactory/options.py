"""Configuration of the image factory service."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import timedelta
from fractions import Fraction


@dataclass
class SecureBootOptions:
    """Secure Boot asset generation settings."""

    enabled: bool = False

    # File-based approach.
    signing_key_path: str = ""
    signing_cert_path: str = ""
    pcr_key_path: str = ""

    # Azure Key Vault approach.
    azure_key_vault_url: str = ""
    azure_certificate_name: str = ""
    azure_key_name: str = ""


@dataclass
class Options:
    """Image factory settings, defaulting to the standard deployment."""

    http_listen_addr: str = ":8080"

    min_talos_version: str = "1.2.0"
    image_registry: str = "ghcr.io"
    insecure_image_registry: bool = False

    container_signature_subject_regexp: str = r"@siderolabs\.com$"
    container_signature_issuer_regexp: str = ""
    container_signature_issuer: str = "https://accounts.google.com"
    container_signature_public_key_file: str = ""
    container_signature_public_key_hash_algo: str = "sha256"

    asset_build_max_concurrency: int = 6

    external_url: str = "https://localhost/"
    external_pxe_url: str = ""

    schematic_service_repository: str = "ghcr.io/siderolabs/image-factory/schematics"
    insecure_schematic_repository: bool = False

    installer_internal_repository: str = "ghcr.io/siderolabs"
    installer_external_repository: str = "ghcr.io/siderolabs"
    insecure_installer_internal_repository: bool = False

    talos_version_recheck_interval: timedelta = timedelta(minutes=15)

    cache_signing_key_path: str = ""

    cache_repository: str = "ghcr.io/siderolabs/image-factory/cache"
    insecure_cache_repository: bool = False

    # Empty disables the metrics endpoint.
    metrics_listen_addr: str = ":2122"

    secure_boot: SecureBootOptions = field(default_factory=SecureBootOptions)


DEFAULT_OPTIONS = Options()

_NANOSECONDS = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_MAX_NANOSECONDS = (1 << 63) - 1

_COMPONENT = re.compile(r"([0-9]*)(?:\.([0-9]*))?([^0-9.]*)")


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``15m``, ``1h30m`` or ``-1.5s``.

    Each component is a decimal number followed by a unit (ns, us, ms, s,
    m, h); a bare ``0`` is also accepted. Precision below a microsecond is
    truncated.
    """
    original = text
    negative = False
    if text[:1] in ("-", "+"):
        negative = text[0] == "-"
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration {original!r}")

    total = Fraction(0)
    pos = 0
    while pos < len(text):
        match = _COMPONENT.match(text, pos)
        whole, fraction, unit = match.group(1), match.group(2), match.group(3)
        if not whole and not fraction:
            raise ValueError(f"invalid duration {original!r}")
        if not unit:
            raise ValueError(f"missing unit in duration {original!r}")
        if unit not in _NANOSECONDS:
            raise ValueError(f"unknown unit {unit!r} in duration {original!r}")

        value = Fraction(int(whole or "0"))
        if fraction:
            value += Fraction(int(fraction), 10 ** len(fraction))
        total += value * _NANOSECONDS[unit]
        if total > _MAX_NANOSECONDS:
            raise ValueError(f"invalid duration {original!r}")
        pos = match.end()

    nanoseconds = int(total)
    if negative:
        nanoseconds = -nanoseconds
    return timedelta(microseconds=int(Fraction(nanoseconds, 1000)))