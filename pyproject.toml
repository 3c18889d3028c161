[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "littlevec"
version = "0.1.0"
description = "A small in-memory vector database with a JSON-over-HTTP interface for nearest-neighbour search"
requires-python = ">=3.10"
keywords = [
    "vector database",
    "nearest neighbour",
    "similarity search",
    "embeddings",
    "cosine distance",
]
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
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: Scientific/Engineering :: Information Analysis",
]
dependencies = [
    "sortedcontainers",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
littlevec = "littlevec.server:main"

[tool.hatch.build.targets.wheel]
packages = ["littlevec"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
