[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "brownpmf"
version = "0.1.0"
description = "Brownian dynamics of primitive-model electrolytes with macroions: energies, MSD, g(r) and rho(r)"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "brownian dynamics",
    "electrolyte",
    "primitive model",
    "potential of mean force",
    "radial distribution function",
    "macroion",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
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
test = [
    "pytest",
]

[project.scripts]
brownpmf = "brownpmf.simulation:main"

[tool.hatch.build.targets.wheel]
packages = ["brownpmf"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
