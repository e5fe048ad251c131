"""Bring a workstation into the state described by a YAML configuration file."""

__version__ = "0.1.0"