[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nelly"
version = "0.1.0"
description = "A small scripting language for describing git repository setup"
requires-python = ">=3.10"
dependencies = []
keywords = ["dsl", "interpreter", "git", "scripting"]
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
    "Topic :: Software Development :: Interpreters",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
nelly = "nelly.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["nelly"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
