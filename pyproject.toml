[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "eec"
version = "0.1.dev0"
description = "Run a program with environment variables taken from a TOML config, with saved tags and temp-file cleanup"
requires-python = ">=3.11"
dependencies = []
keywords = ["environment", "env", "launcher", "toml", "path", "cli"]
classifiers = [
    "Development Status :: 2 - Pre-Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
eec = "eec.cli:main"
eec-deleter = "eec.deleter:main"

[tool.hatch.build.targets.wheel]
packages = ["eec"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"
