[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "atomc"
version = "0.1.0"
description = "Lexer, parser with domain analysis, and a small stack virtual machine for the AtomC language"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "lexer", "parser", "symbol-table", "virtual-machine", "atomc"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Environment :: Console",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
atomc = "atomc.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["atomc"]

[tool.pytest.ini_options]
addopts = "-ra"
