[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dinothawr"
version = "0.1.0"
description = "Audio mixing, bitmap fonts, game rules and progress tracking for an ice-sliding block-pushing puzzle game"
requires-python = ">=3.10"
keywords = ["game", "puzzle", "sokoban", "audio", "mixer", "bitmap-font", "save-data"]
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
    "Topic :: Games/Entertainment :: Puzzle Games",
    "Topic :: Multimedia :: Sound/Audio :: Mixers",
]
dependencies = [
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["dinothawr"]

[tool.pytest.ini_options]
addopts = "-ra"
