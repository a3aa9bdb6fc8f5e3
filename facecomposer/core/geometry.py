from __future__ import annotations

import math
from typing import Optional, Tuple


def _round_half_up(value: float) -> int:
    # .5 goes up, not to even
    return math.floor(value + 0.5)


def proportional_height(intrinsic_w: float, intrinsic_h: float, target_w: float) -> int:
    """Height that keeps the intrinsic aspect ratio at `target_w`."""
    return _round_half_up(intrinsic_h / intrinsic_w * target_w)


def proportional_width(intrinsic_w: float, intrinsic_h: float, target_h: float) -> int:
    """Width that keeps the intrinsic aspect ratio at `target_h`."""
    return _round_half_up(intrinsic_w / intrinsic_h * target_h)


def centered_position(
    container_w: float,
    container_h: float,
    image_w: float,
    image_h: float,
) -> Tuple[float, float]:
    """Top-left corner that centers an image inside the container (may be negative)."""
    return (container_w - image_w) / 2, (container_h - image_h) / 2


def resolve_size(
    intrinsic_w: float,
    intrinsic_h: float,
    w: Optional[float],
    h: Optional[float],
) -> Tuple[Optional[float], Optional[float]]:
    """
    Fill in the one missing dimension from the intrinsic aspect ratio.
    Both given or both missing -> returned unchanged.
    """
    if w is not None and h is None:
        return w, proportional_height(intrinsic_w, intrinsic_h, w)
    if w is None and h is not None:
        return proportional_width(intrinsic_w, intrinsic_h, h), h
    return w, h
