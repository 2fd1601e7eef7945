"""
Utility functions for the splat field package.

This module provides logging setup shared by the command-line entry points.
"""

from simple_splat_field.utils.log import setup_logging

__all__ = ["setup_logging"]
