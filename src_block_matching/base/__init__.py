"""
Base classes for batch stereo processing.

This package provides the shared base classes for file management and
per-pair processing.
"""

from .file_manager import BaseFileManager
from .processor import BaseProcessor

__all__ = ['BaseFileManager', 'BaseProcessor']
