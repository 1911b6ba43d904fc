[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "triviaquiz"
version = "1.0.0"
description = "A multi-player trivia quiz server and terminal client over TCP"
requires-python = ">=3.10"
dependencies = []
keywords = ["trivia", "quiz", "game", "multiplayer", "tcp"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Natural Language :: Italian",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Puzzle Games",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
triviaquiz-server = "triviaquiz.server:main"
triviaquiz-client = "triviaquiz.client:main"

[tool.hatch.build.targets.wheel]
packages = ["triviaquiz"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
