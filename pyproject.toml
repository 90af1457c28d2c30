[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "llmsupport"
version = "1.0.0"
description = "Codebase analysis and text transformation helpers for LLM-assisted workflows"
requires-python = ">=3.11"
dependencies = []
keywords = [
    "llm",
    "codebase",
    "markdown",
    "json",
    "toml",
    "templates",
    "grep",
    "checksum",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Text Processing :: Filters",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["llmsupport"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
