[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nexusprover"
version = "0.10.14"
description = "Prover node toolkit: task records, adaptive difficulty, version requirements, system metrics and dashboard state"
requires-python = ">=3.10"
keywords = ["prover", "zkvm", "distributed computing", "dashboard", "version check", "keccak"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "psutil",
    "requests",
    "semver",
    "pycryptodome",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
nexusprover-fib = "nexusprover.fib:main"

[tool.hatch.build.targets.wheel]
packages = ["nexusprover"]

[tool.hatch.build.targets.sdist]
include = ["nexusprover", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
