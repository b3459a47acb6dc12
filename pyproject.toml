[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "blockalloc"
version = "0.1.0"
description = "A bitmap block allocator over a simulated address space, plus small character-printing routines"
requires-python = ">=3.10"
dependencies = []
keywords = ["allocator", "bitmap", "memory", "simulation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
blockalloc = "blockalloc.cli:main"
blockalloc-print = "blockalloc.printing:main"

[tool.hatch.build.targets.wheel]
packages = ["blockalloc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
