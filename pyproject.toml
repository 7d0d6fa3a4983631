[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xraycore"
version = "0.1.0"
description = "Core building blocks for distributed tracing: trace headers, daemon endpoints, sampling patterns, host metadata and error formatting"
requires-python = ">=3.10"
dependencies = []
keywords = ["tracing", "x-ray", "trace-header", "sampling", "observability"]
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
    "Topic :: System :: Monitoring",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["xraycore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
