[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kontext"
version = "0.1.0"
description = "Manage Kubernetes contexts in your kubectl configuration"
requires-python = ">=3.10"
keywords = ["kubernetes", "kubectl", "kubeconfig", "context", "cli"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
    "Topic :: Utilities",
]
dependencies = [
    "pyyaml>=6.0",
    "requests>=2.28",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
kontext = "kontext.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["kontext"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
