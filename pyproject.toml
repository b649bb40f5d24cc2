[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netwatchdog"
version = "0.1.0"
description = "Local network outage detection with automatic recovery actions"
requires-python = ">=3.11"
dependencies = [
    "tomli-w",
]
keywords = ["network", "monitoring", "ping", "recovery", "watchdog", "connectivity"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: X11 Applications",
    "Environment :: Win32 (MS Windows)",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
netwatchdog = "netwatchdog.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["netwatchdog"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
