[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gizmos"
version = "0.1.0"
description = "Small tools: a Redis-compatible key-value server, Code 128 barcodes, puzzles and tiny network servers"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "redis",
    "resp",
    "barcode",
    "code128",
    "pbm",
    "sudoku",
    "word-search",
    "minesweeper",
    "http-server",
    "thread-pool",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
    "Topic :: Games/Entertainment :: Puzzle Games",
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gizmos-redis-server = "gizmos.redis.server:main"
gizmos-barcode = "gizmos.barcode:main"
gizmos-http-server = "gizmos.httpserver:main"
gizmos-wordsearch = "gizmos.wordsearch:main"
gizmos-sudoku = "gizmos.sudoku:main"
gizmos-hello-socket = "gizmos.hellosocket:main"

[tool.hatch.build.targets.wheel]
packages = ["gizmos"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
