import io
from typing import Tuple

import numpy as np
from PIL import Image

from utils.exceptions import EncodingError
from utils.logging import log_message


def elliptical_outside_mask(
    size: Tuple[int, int],
    center: Tuple[float, float],
    radii: Tuple[float, float],
) -> np.ndarray:
    """
    Boolean (height, width) array that is True for pixels outside the ellipse.

    Pixels are addressed by their integer index, the same coordinates the
    ellipse was drawn in.
    """
    width, height = size
    center_x, center_y = center
    radius_x, radius_y = radii
    if radius_x <= 0 or radius_y <= 0:
        return np.ones((height, width), dtype=bool)

    ys, xs = np.ogrid[:height, :width]
    norm_x = (xs - center_x) / radius_x
    norm_y = (ys - center_y) / radius_y
    return norm_x * norm_x + norm_y * norm_y > 1.0


def apply_elliptical_mask(
    image: Image.Image,
    center: Tuple[float, float],
    radii: Tuple[float, float],
) -> Image.Image:
    """
    Zeroes the alpha channel of every pixel outside the ellipse.

    Hard clip: the ellipse edge keeps the anti-aliasing it was drawn with,
    only the corners outside it become transparent.

    Args:
        image (PIL.Image): Image to mask (converted to RGBA if needed)
        center (tuple): Ellipse centre in pixel coordinates
        radii (tuple): Ellipse radii in pixels

    Returns:
        PIL.Image: New RGBA image; the input is not modified
    """
    rgba = np.array(image.convert("RGBA"))
    outside = elliptical_outside_mask(image.size, center, radii)
    rgba[outside, 3] = 0
    return Image.fromarray(rgba)


def encode_png(image: Image.Image, png_compression: int = 6, verbose: bool = False) -> bytes:
    """
    Encodes an image as PNG bytes.

    Raises:
        EncodingError: If encoding fails
    """
    compress_level = max(0, min(png_compression, 9))
    buffer = io.BytesIO()
    try:
        image.save(buffer, format="PNG", compress_level=compress_level)
    except Exception as e:
        log_message(f"PNG encoding failed: {e}", always_print=True)
        raise EncodingError(f"Failed to encode image as PNG: {e}") from e

    png_bytes = buffer.getvalue()
    log_message(
        f"Encoded {image.size[0]}x{image.size[1]} PNG ({len(png_bytes)} bytes, "
        f"compression {compress_level})",
        verbose=verbose,
    )
    return png_bytes
