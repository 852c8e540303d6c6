[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ocmodel"
version = "0.1.0"
description = "Versioned type names, matchable identities and the component descriptor model with JSON and YAML support"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["component", "descriptor", "identity", "json", "yaml"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["ocmodel"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
