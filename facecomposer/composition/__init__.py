from __future__ import annotations

"""
Layer composition engine:
- layer model
- ordered layer store
- controller mediating every mutation
- rendering surface contract
"""

from facecomposer.composition.controller import CompositionController, SaveResult
from facecomposer.composition.layer import BACKGROUND_NAME, Layer, LayerOptions, build_layer
from facecomposer.composition.store import LayerStore
from facecomposer.composition.surface import RenderingSurface

__all__ = [
    "BACKGROUND_NAME",
    "CompositionController",
    "Layer",
    "LayerOptions",
    "LayerStore",
    "RenderingSurface",
    "SaveResult",
    "build_layer",
]
