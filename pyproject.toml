[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "quoteclient"
version = "1.0.0"
description = "Terminal securities quote client with a stock table and time-series and candlestick charts"
requires-python = ">=3.10"
dependencies = [
    "rich",
]
keywords = [
    "stocks",
    "quotes",
    "market data",
    "candlestick",
    "terminal",
    "finance",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Financial and Insurance Industry",
    "Natural Language :: Chinese (Simplified)",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
quoteclient = "quoteclient.application:main"

[tool.hatch.build.targets.wheel]
packages = ["quoteclient"]

[tool.hatch.build.targets.sdist]
include = [
    "quoteclient",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
