[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "slvkit"
version = "0.3.0"
description = "Client-side building blocks for a virtual-world viewer: LLUDP packets, camera maths, scene, world and login state"
requires-python = ">=3.10"
dependencies = []
keywords = ["lludp", "virtual-world", "viewer", "simulation", "camera", "llsd"]
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
    "Topic :: Games/Entertainment :: Simulation",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["slvkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
