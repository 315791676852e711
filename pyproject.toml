[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "agrodispenser"
version = "0.1.0"
description = "Control logic for a two-channel fertilizer dispenser: PI motor control, ADC scaling, GPS speed, a text command protocol and persisted settings."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "dispenser",
    "fertilizer",
    "pi-controller",
    "ads1115",
    "motor-driver",
    "command-parser",
    "agriculture",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
agrodispenser = "agrodispenser.app:main"

[tool.hatch.build.targets.wheel]
packages = ["agrodispenser"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
