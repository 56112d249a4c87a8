"""
config - Source values from configuration files.

This module provides:
- FileConfig: Read one section of a YAML config file as a source mapping.
"""

from .file_config import FileConfig  # noqa: F401
