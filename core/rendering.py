from typing import Optional

import skia
from PIL import Image

from core.config import RenderingConfig
from core.image.image_utils import apply_elliptical_mask
from core.text.drawing_engine import (BubbleFont, draw_bubble_outline,
                                      draw_glyphs, resolve_bubble_font,
                                      skia_surface_to_pil)
from core.text.layout_engine import LayoutPlan
from utils.exceptions import RenderingError
from utils.logging import log_message


def render_bubble(
    plan: LayoutPlan,
    export_quality: bool = True,
    config: Optional[RenderingConfig] = None,
    bubble_font: Optional[BubbleFont] = None,
    verbose: bool = False,
) -> Image.Image:
    """
    Draws a layout plan into a new RGBA image.

    The surface is ``scale_factor`` times the plan's canvas size and the plan
    is drawn in logical pixels through a canvas scale, so edges stay crisp.
    With ``export_quality`` the corners outside the ellipse are made fully
    transparent.

    Args:
        plan (LayoutPlan): Output of compute_layout
        export_quality (bool): Whether to apply the elliptical alpha mask
        config (RenderingConfig): Font, colours and supersampling factor
        bubble_font (BubbleFont): Preloaded font; resolved from config if None
        verbose (bool): Whether to print detailed logs

    Returns:
        PIL.Image: RGBA image of size canvas * scale_factor

    Raises:
        FontError: If the configured font cannot be loaded
        RenderingError: If drawing or pixel readback fails
    """
    config = config or RenderingConfig()
    scale = config.scale_factor
    if bubble_font is None:
        bubble_font = resolve_bubble_font(config, verbose=verbose)

    surface_width = plan.canvas_width * scale
    surface_height = plan.canvas_height * scale
    try:
        surface = skia.Surface(surface_width, surface_height)
    except Exception as e:
        raise RenderingError(
            f"Failed to allocate {surface_width}x{surface_height} surface"
        ) from e

    with surface as canvas:
        canvas.clear(skia.ColorTRANSPARENT)
        canvas.scale(scale, scale)
        draw_bubble_outline(canvas, plan, config)
        draw_glyphs(canvas, plan, bubble_font, config, verbose=verbose)

    image = skia_surface_to_pil(surface)
    log_message(
        f"Rendered bubble {image.size[0]}x{image.size[1]} "
        f"({plan.line_count} columns, {plan.max_chars} rows)",
        verbose=verbose,
    )

    if not export_quality:
        return image

    center_x, center_y = plan.ellipse_center
    radius_x, radius_y = plan.ellipse_radii
    return apply_elliptical_mask(
        image,
        center=(center_x * scale, center_y * scale),
        radii=(radius_x * scale, radius_y * scale),
    )
