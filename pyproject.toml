[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nearmatch"
version = "0.1.0"
description = "Find the closest known text to an unknown string, and locate known texts inside larger documents, using token hashing and edit distance."
requires-python = ">=3.10"
dependencies = []
keywords = ["levenshtein", "fuzzy matching", "text classification", "license detection", "diff"]
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
    "Topic :: Text Processing",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["nearmatch"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
