from __future__ import annotations

"""
Face composer: background + overlay layer composition with flattened export
and named saves.
"""

from facecomposer.composition import CompositionController, Layer, LayerOptions, SaveResult
from facecomposer.session import CompositionContext

__all__ = [
    "CompositionContext",
    "CompositionController",
    "Layer",
    "LayerOptions",
    "SaveResult",
]
