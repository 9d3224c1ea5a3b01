[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bsonkit"
version = "0.1.0"
description = "BSON value types, datetimes and extended JSON conversion"
requires-python = ">=3.10"
keywords = ["bson", "extended-json", "objectid", "datetime"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["bsonkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
