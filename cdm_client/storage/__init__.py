"""
Storage Layer.

This package handles persistence of the INI configuration file.
"""

from .config_manager import ConfigManager

__all__ = ["ConfigManager"]
