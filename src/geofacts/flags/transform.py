"""Circular flag variants cut from rectangular flag images."""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Final

from PIL import Image, ImageChops, ImageDraw, UnidentifiedImageError

from geofacts.errors import ImageDecodeFailure, ImageTooSmall

type Color = tuple[int, int, int, int]

MIN_FLAG_SIDE: Final[int] = 16
DEFAULT_BORDER_WIDTH: Final[int] = 2

BLACK: Final[Color] = (0, 0, 0, 255)
WHITE: Final[Color] = (255, 255, 255, 255)
BLUE: Final[Color] = (0, 0, 255, 255)
GREEN: Final[Color] = (0, 255, 0, 255)
YELLOW: Final[Color] = (255, 255, 0, 255)
RED: Final[Color] = (255, 0, 0, 255)


@dataclass(frozen=True, slots=True)
class FlagVariant:
    name: str
    border_color: Color | None = None

    @property
    def filename(self) -> str:
        return f"{self.name}.png"


VARIANTS: Final[tuple[FlagVariant, ...]] = (
    FlagVariant("round"),
    FlagVariant("round_bl", BLACK),
    FlagVariant("round_wh", WHITE),
    FlagVariant("round_b", BLUE),
    FlagVariant("round_g", GREEN),
    FlagVariant("round_y", YELLOW),
    FlagVariant("round_r", RED),
)


def decode_image(data: bytes, *, code: str | None = None) -> Image.Image:
    """Decode ``data`` into an RGBA image or raise :class:`ImageDecodeFailure`."""

    try:
        with Image.open(BytesIO(data)) as image:
            image.load()
            return image.convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ImageDecodeFailure(code, f"Cannot decode flag image: {exc}") from exc


def crop_box(width: int, height: int) -> tuple[int, int, int, int]:
    """Largest centered square inside ``width`` x ``height`` as a PIL box."""

    side = min(width, height)
    left = (width - side) // 2
    top = (height - side) // 2
    return left, top, left + side, top + side


def transform(
    source: Image.Image,
    border_width: int = 0,
    border_color: Color = BLACK,
    *,
    code: str | None = None,
) -> Image.Image:
    """Crop ``source`` to a centered circle, optionally ringed with ``border_color``.

    The result is a ``side x side`` RGBA image where ``side`` is the shorter edge
    of ``source``; every pixel outside the inscribed circle is fully transparent.
    """

    if border_width < 0:
        raise ValueError(f"border_width must not be negative, got {border_width}")
    side = min(source.size)
    if side < MIN_FLAG_SIDE or side <= 2 * border_width:
        raise ImageTooSmall(
            code,
            f"Flag image {source.size[0]}x{source.size[1]} is too small "
            f"(minimum side {MIN_FLAG_SIDE}, border {border_width})",
        )

    square = source.convert("RGBA").crop(crop_box(*source.size))
    bounds = (0, 0, side - 1, side - 1)

    mask = Image.new("L", (side, side), 0)
    ImageDraw.Draw(mask).ellipse(bounds, fill=255)
    square.putalpha(ImageChops.multiply(square.getchannel("A"), mask))

    if border_width > 0:
        ImageDraw.Draw(square).ellipse(bounds, outline=border_color, width=border_width)
    return square


def render_variant(
    source: Image.Image,
    variant: FlagVariant,
    *,
    border_width: int = DEFAULT_BORDER_WIDTH,
    code: str | None = None,
) -> Image.Image:
    if variant.border_color is None:
        return transform(source, code=code)
    return transform(source, border_width, variant.border_color, code=code)


def encode_png(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
