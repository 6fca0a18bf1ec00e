import logging
from typing import Optional, Tuple

import numpy as np
import numpy.typing as npt
from PIL import Image, ImageDraw, ImageFont

# Type aliases for clarity
UInt8Array = npt.NDArray[np.uint8]
RGBA = Tuple[int, int, int, int]
Font = ImageFont.FreeTypeFont | ImageFont.ImageFont

logger = logging.getLogger(__name__)


def is_drawable(
    sprite: Optional[Image.Image], expected_size: Optional[Tuple[int, int]] = None
) -> bool:
    """
    True if ``sprite`` has pixels to draw and, when ``expected_size`` is given,
    exactly that size.
    """
    if sprite is None:
        return False
    width, height = sprite.size
    if width == 0 or height == 0:
        return False
    return expected_size is None or sprite.size == tuple(expected_size)


def overlay(
    canvas: Image.Image,
    sprite: Optional[Image.Image],
    offset: Tuple[int, int],
    expected_size: Optional[Tuple[int, int]] = None,
) -> Image.Image:
    """
    Source-over composite ``sprite`` onto ``canvas`` in place at ``offset``.
    Parts falling outside the canvas are clipped. Empty or mis-sized sprites
    leave the canvas untouched.
    """
    if not is_drawable(sprite, expected_size):
        logger.debug(
            "Skipping overlay at %s: sprite size %s, expected %s",
            offset,
            None if sprite is None else sprite.size,
            expected_size,
        )
        return canvas
    assert sprite is not None
    if sprite.mode != "RGBA":
        sprite = sprite.convert("RGBA")
    canvas.alpha_composite(sprite, dest=(int(offset[0]), int(offset[1])))
    return canvas


def solid_image(size: Tuple[int, int], color: RGBA) -> Image.Image:
    """RGBA image of ``size`` filled with ``color``."""
    return Image.new("RGBA", size, color)


def draw_count(
    image: Image.Image,
    origin: Tuple[int, int],
    count: int,
    font: Font,
    fill: RGBA = (0, 0, 0, 255),
) -> Image.Image:
    """
    Draw ``count`` in decimal with its top-left at ``origin``.
    """
    draw = ImageDraw.Draw(image)
    draw.text(origin, str(count), fill=fill, font=font)
    return image


def image_to_array(image: Image.Image) -> UInt8Array:
    """(H, W, 4) uint8 view of an RGBA image."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return np.array(image, dtype=np.uint8)
