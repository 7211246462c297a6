[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "aeroplan"
version = "0.1.0"
description = "Grid cells, risk scoring and heuristics for global path planning, local avoidance helpers and landing grids for aerial vehicles"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["path planning", "drone", "obstacle avoidance", "occupancy grid", "uav", "risk"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["aeroplan"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
