[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "diphonebase"
version = "0.1.0"
description = "Reader, phoneme renamer and ROM image writer for MBR diphone speech databases"
requires-python = ">=3.10"
dependencies = []
keywords = ["speech", "synthesis", "diphone", "database", "phoneme", "rom"]
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
    "Topic :: Multimedia :: Sound/Audio :: Speech",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["diphonebase"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
