# talosfactory

Building blocks for a service that produces Talos Linux boot assets and
installer images on demand: semantic version handling, reading the official
extension and overlay catalogues, platform and single-board computer
metadata, service options, registry redirect helpers, the web wizard's state
machine, and helpers for the pieces of HTTP responses.

## Versions

`talosfactory.versioning` parses and compares semantic versions and decides
which published Talos versions are offered:

```python
from talosfactory import versioning

version = versioning.parse("1.7.0")            # strict
tolerant = versioning.parse_tolerant("v1.7")   # 1.7.0
offered = versioning.filter_talos_versions(
    ["v1.6.0", "v1.7.0-alpha.1", "v1.7.0", "not-a-version"],
    versioning.parse("1.2.0"),
)
# [1.6.0, 1.7.0-alpha.1, 1.7.0]
```

Unparseable tags and versions below the minimum are dropped. Pre-releases are
kept only for the newest minor release and only in the `alpha.N` / `beta.N`
form; the result is sorted ascending. `Version` supports `compare()`,
`is_prerelease()` and the usual comparison operators. Invalid input raises
`VersionError`.

## Extensions and overlays

`talosfactory.artifacts` defines the `Arch` and `Kind` enumerations and reads
the tar exports of the official extension and overlay manifest images:

```python
from talosfactory import artifacts

with open("extensions.tar", "rb") as stream:
    extensions = artifacts.extract_extension_list(stream)

with open("overlays.tar", "rb") as stream:
    overlays = artifacts.extract_overlay_list(stream)
```

Extensions come from the `image-digests` file, with author and description
filled in from `descriptions.yaml` where present; overlays come from
`overlays.yaml`. A missing file raises `NotFoundError`, unreadable data
`ArtifactsError`. Each `ExtensionRef` and `OverlayRef` carries an `ImageTag`
(see `parse_tag`); its `repository_str()` gives the repository path without
the registry.

## Platforms and boards

```python
from talosfactory import metadata

aws = metadata.find_platform("aws")
rpi = metadata.find_sbc("rpi_generic")
every_platform = metadata.platforms()
every_board = metadata.sbcs()
aws.not_only_disk_image()   # False
```

## Options

`talosfactory.options` holds the service configuration as the `Options` and
`SecureBootOptions` dataclasses, with the standard deployment's values as
defaults (`DEFAULT_OPTIONS`). `parse_duration` reads durations such as `15m`,
`1h30m` or `-1.5s` into a `timedelta`.

## Registry helpers

```python
from talosfactory import registry

image = registry.requested_image("installer-secureboot")
location = registry.redirect_location(
    "https", "ghcr.io", "siderolabs", image.name(),
    "schematic-id", "manifests", "v1.7.0",
)
# https://ghcr.io/v2/siderolabs/installer-secureboot/schematic-id/manifests/v1.7.0
```

`is_passthrough_tag` tells digests and non-version tags apart from versions to
build, `installer_repository` names the internal repository of an installer
image, and `build_key` gives the key that merges concurrent builds.

## Wizard

`talosfactory.wizard` turns submitted form values into `WizardParams`
(`params_from_form`), chooses the next step with `next_step` (which returns a
`WizardStep` and the parameters with that step's default selection), and
finally produces a schematic document with `build_schematic`:

```python
from talosfactory import wizard

params = wizard.params_from_form({
    "target": "metal", "version": "1.7.0", "arch": "amd64",
    "extensions": ["siderolabs/gvisor"], "cmdline-set": "true",
})
step, params = wizard.next_step(params)        # WizardStep.FINAL
schematic, legacy_board = wizard.build_schematic(params)
```

`platforms_for_version`, `sbcs_for_version`, `secure_boot_supported` and
`overlay_options_enabled` answer the per-version questions the steps ask.

## UI and endpoint helpers

`talosfactory.uihelpers` groups versions for the version picker
(`group_versions`), shortens versions (`short_version`), builds mappings from
alternating keys and values (`make_dict`) and filters extension lists
(`filter_extensions`).

`talosfactory.endpoints` normalises version tags (`normalize_version_tag`),
lists version labels (`version_labels`), describes extensions and overlays
(`extension_info`, `overlay_info`), builds PXE URLs (`pxe_urls`,
`secureboot_uki_url`) and the download header (`content_disposition`).

## What this package does not do

It has no command to run, parses no command-line flags and runs no HTTP
server. It does not pull, verify, sign or push images in a registry, does not
build or cache boot assets, and does not produce the tarball that records a
schematic inside an image. It supplies the data handling and decisions such a
service is built on.

## Tests

The test suite uses pytest and is installed with the `test` extra:

```
pip install -e .[test]
pytest
```