[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mipsim"
version = "0.1.0"
description = "Cycle-level simulator of a MIPS processor with single-cycle and pipelined models and a two-level cache"
requires-python = ">=3.10"
dependencies = []
keywords = ["mips", "simulator", "pipeline", "cache", "computer-architecture", "elf"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
mipsim = "mipsim.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["mipsim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
