[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "steamkit"
version = "0.1.0"
description = "Steam IDs, mobile authenticator codes, social caches, trade offers and web trading for Steam"
requires-python = ">=3.10"
keywords = ["steam", "steamid", "totp", "trading", "tf2"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["steamkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
