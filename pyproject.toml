[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "settle"
version = "0.1.0"
description = "Declarative workstation setup: symlink dotfiles, install packages and write shell and editor configs from one YAML file."
requires-python = ">=3.10"
keywords = ["dotfiles", "homebrew", "apt", "pacman", "zsh", "neovim", "provisioning"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: MacOS",
    "Operating System :: POSIX :: Linux",
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
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
settle = "settle.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["settle"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
