"""
Media Layer.

This package is responsible for downloading item files to disk.
"""

from .downloader import AssetDownloader

__all__ = ["AssetDownloader"]
