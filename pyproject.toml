[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "magicpager"
version = "0.1.0"
description = "A terminal pager that shows a file or command output and refreshes it on a timer or when files change"
requires-python = ">=3.10"
keywords = ["pager", "terminal", "watch", "tui", "less"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
]
dependencies = [
    "regex",
    "watchdog",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
mp = "magicpager.main:main"

[tool.hatch.build.targets.wheel]
packages = ["magicpager"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
