[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "relhydro"
version = "0.1.0"
description = "Tabulated equations of state and constant-value hypersurface finding for relativistic hydrodynamics"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "hydrodynamics",
    "heavy-ion",
    "equation of state",
    "hypersurface",
    "freeze-out",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["relhydro"]

[tool.pytest.ini_options]
addopts = "-ra"
