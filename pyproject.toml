[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "muksview"
version = "0.1.0"
description = "Terminal rendering of Matrix chat messages: styled strings, HTML entities and a scrolling message view"
requires-python = ">=3.10"
keywords = ["matrix", "chat", "terminal", "tui", "html", "rendering"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
    "Topic :: Terminals",
    "Topic :: Text Processing :: Markup :: HTML",
]
dependencies = [
    "html5lib",
    "pygments",
    "wcwidth",
    "markdown-it-py",
    "regex",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["muksview"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
