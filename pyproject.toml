[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ldkit"
version = "0.1.0"
description = "JSON-LD context storage, document loading, linked-data proofs and structural validation"
requires-python = ">=3.10"
keywords = ["json-ld", "linked-data", "proof", "verifiable-credentials", "context", "jws"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ldkit"]

[tool.pytest.ini_options]
addopts = "-ra"
