from __future__ import annotations

"""
This module provides core functionality for the application.

It includes clock, geometry, hashing, ID generation and general utilities.
"""

from facecomposer.core import clock, geometry, hashing, ids, utils

__all__ = [
    "clock",
    "geometry",
    "hashing",
    "ids",
    "utils"
]
