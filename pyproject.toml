[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "finprov"
version = "0.1.0"
description = "Configuration, parameter handling and home-directory setup for a finality provider daemon"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "finality-provider",
    "bitcoin-staking",
    "configuration",
    "bech32",
    "commission",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
fpd = "finprov.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["finprov"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
