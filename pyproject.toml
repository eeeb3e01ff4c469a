[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "aletheia"
version = "0.1.0"
description = "Game save backup tool"
requires-python = ">=3.10"
keywords = ["backup", "games", "saves", "steam", "lutris", "heroic", "gog"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Operating System :: Microsoft :: Windows",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving :: Backup",
    "Topic :: Games/Entertainment",
]
dependencies = [
    "pyyaml>=6.0",
    "requests>=2.31",
    "semver>=3.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "responses>=0.24",
]

[project.scripts]
aletheia = "aletheia.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["aletheia"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
