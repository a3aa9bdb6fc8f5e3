from __future__ import annotations

"""
Session layer:
- explicitly constructed context holding loader + persistence
- one CompositionController per composition session
"""

from facecomposer.session import context
from facecomposer.session.context import CompositionContext

__all__ = [
    "context",
    "CompositionContext",
]
