from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict

from facecomposer.core.geometry import resolve_size
from facecomposer.core.utils import get_param
from facecomposer.loader.image_loader import LoadedImage

BACKGROUND_NAME = "background"


class LayerOptions(BaseModel):
    """
    Caller-supplied placement. Anything left as None is derived at build
    time or left for the rendering surface to default.
    """
    model_config = ConfigDict(extra="ignore")

    x: Optional[float] = None
    y: Optional[float] = None
    w: Optional[float] = None
    h: Optional[float] = None

    @classmethod
    def coerce(cls, options: Union["LayerOptions", Mapping[str, Any], None]) -> "LayerOptions":
        if options is None:
            return cls()
        if isinstance(options, LayerOptions):
            return options
        return cls.model_validate(dict(options))


class Layer(BaseModel):
    """
    One positioned image in the composition. Identity is `name`.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    image: LoadedImage
    x: Optional[float] = None
    y: Optional[float] = None
    w: Optional[float] = None
    h: Optional[float] = None
    is_draggable: bool = False
    is_resizable: bool = False
    is_background: bool = False


def build_layer(
    image: LoadedImage,
    name: str,
    options: Optional[Mapping[str, Any]] = None,
    *,
    is_draggable: bool = False,
    is_resizable: bool = False,
    is_background: bool = False,
) -> Layer:
    """
    Merge partial placement with the loaded image. When only one of w/h is
    given the other follows the image's intrinsic aspect ratio.
    """
    w, h = resolve_size(
        image.width,
        image.height,
        get_param(options, "w"),
        get_param(options, "h"),
    )
    return Layer(
        name=name,
        image=image,
        x=get_param(options, "x"),
        y=get_param(options, "y"),
        w=w,
        h=h,
        is_draggable=is_draggable,
        is_resizable=is_resizable,
        is_background=is_background,
    )
