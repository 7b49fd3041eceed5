"""Round flag variants rendered from sovereign state flag images."""

from .pipeline import FlagPipeline, RenderedFlag
from .transform import (
    MIN_FLAG_SIDE,
    VARIANTS,
    FlagVariant,
    crop_box,
    decode_image,
    encode_png,
    render_variant,
    transform,
)

__all__ = [
    "MIN_FLAG_SIDE",
    "VARIANTS",
    "FlagPipeline",
    "FlagVariant",
    "RenderedFlag",
    "crop_box",
    "decode_image",
    "encode_png",
    "render_variant",
    "transform",
]
