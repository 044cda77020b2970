[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sensorfusion"
version = "1.0.0"
description = "Multi-sensor entity tracking with Kalman filter fusion, synthetic sensors and live outputs"
requires-python = ">=3.10"
keywords = ["sensor fusion", "kalman filter", "tracking", "simulation", "websocket"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]
dependencies = [
    "numpy",
    "websockets",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
sensorfusion = "sensorfusion.cli:main"
sensorfusion-demo = "sensorfusion.cli:demo"

[tool.hatch.build.targets.wheel]
packages = ["sensorfusion"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
