"""Manage Kubernetes contexts in a kubectl configuration: add, list, merge, delete and clean."""

__version__ = "0.1.0"