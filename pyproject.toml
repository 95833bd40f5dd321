[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tradecalc"
version = "1.0.0"
description = "Trading analytics toolkit: equity statistics, risk profiles, Monte Carlo risk curves, trade journal, backtesting and charts"
requires-python = ">=3.10"
keywords = ["trading", "backtesting", "risk", "equity curve", "kelly criterion", "journal"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
]
dependencies = [
    "matplotlib",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["tradecalc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
