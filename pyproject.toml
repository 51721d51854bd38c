[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "daprcli"
version = "0.1.0"
description = "Building blocks for a self-hosted Dapr runtime: release lookup, image resolution, component files, binary installation and build information."
requires-python = ">=3.10"
keywords = ["dapr", "runtime", "installer", "docker", "components", "releases"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]
dependencies = [
    "pyyaml>=6.0",
    "packaging>=21.0",
    "requests>=2.25",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[tool.hatch.build.targets.wheel]
packages = ["daprcli"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
