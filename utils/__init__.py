"""
Shared helpers for the block matching toolkit: logging, file operations,
image handling and chart rendering.
"""
