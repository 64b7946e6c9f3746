[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gmailctl"
version = "0.1.0"
description = "Declarative Gmail filters: rule simplification, filter generation, diffing and export"
requires-python = ">=3.10"
keywords = ["gmail", "email", "filters", "labels", "declarative"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Email :: Filters",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gmailctl"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
