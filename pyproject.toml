[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "quarrysim"
version = "0.1.0"
description = "Quarry simulation data tools: rock CSV loading, terrain heightmaps and meshes, RON accessory definitions, and excavator, truck and wheeled-vehicle control models."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "simulation",
    "heightmap",
    "terrain",
    "excavator",
    "vehicle",
    "mining",
    "quarry",
    "ron",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["quarrysim"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
