[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "spotcore"
version = "0.1.0"
description = "Building blocks for a Spotify Connect client: IDs, credentials, caching, key exchange, channels, discovery and metadata helpers."
requires-python = ">=3.10"
keywords = [
    "spotify",
    "spotify-connect",
    "audio",
    "streaming",
    "zeroconf",
    "asyncio",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Framework :: AsyncIO",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Players",
]
dependencies = [
    "aiohttp",
    "cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["spotcore"]

[tool.hatch.build.targets.sdist]
include = [
    "spotcore",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
target-version = "py310"
line-length = 100

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
check_untyped_defs = true
