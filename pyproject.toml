[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "talosfactory"
version = "0.1.0"
description = "Building blocks for a Talos Linux boot asset and installer image factory"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = [
    "talos",
    "boot-assets",
    "installer",
    "oci",
    "pxe",
    "schematic",
    "semver",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["talosfactory"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
