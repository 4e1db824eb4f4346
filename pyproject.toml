[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "prototool"
version = "1.0.0.dev0"
description = "Protobuf tooling: config discovery, protoc download and caching, and readable protoc failures"
requires-python = ">=3.10"
keywords = ["protobuf", "protoc", "code generation", "configuration", "lint"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Code Generators",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["prototool"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
