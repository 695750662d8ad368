[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "onec-mcp"
version = "0.1.0"
description = "HTTP client, data models, prompts and extension installer for exposing 1C:Enterprise infobases to MCP tools"
requires-python = ">=3.10"
dependencies = []
keywords = ["1c", "1c-enterprise", "mcp", "bsl", "http-service", "installer"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Natural Language :: Russian",
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
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["onec_mcp"]

[tool.hatch.build.targets.sdist]
include = ["onec_mcp", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
