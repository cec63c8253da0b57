"""Vanity import-path pages served from reloadable templates and project files."""

__version__ = "0.1.0"
