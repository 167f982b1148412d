import os
import threading
from dataclasses import dataclass
from typing import Optional, Tuple

import skia
import uharfbuzz as hb
from PIL import Image

from core.config import RenderingConfig
from core.text.font_manager import LRUCache, load_font_data, resolve_font_path
from core.text.layout_engine import GlyphPlacement, LayoutPlan, shape_line
from utils.exceptions import FontError, RenderingError
from utils.logging import log_message

_typeface_cache = LRUCache(max_size=20)
_hb_face_cache = LRUCache(max_size=20)
_font_cache_lock = threading.RLock()

# HarfBuzz uses 26.6 fixed-point format (64 units per pixel)
HB_26_6_SCALE_FACTOR = 64.0


@dataclass
class BubbleFont:
    """Typeface used for a bubble. ``hb_face`` is None for system fallbacks."""

    typeface: skia.Typeface
    hb_face: Optional[hb.Face] = None
    name: str = ""


def load_font_resources(font_path: str) -> Tuple[bytes, skia.Typeface, hb.Face]:
    """
    Loads font data, Skia Typeface, and HarfBuzz Face, using LRU caching.

    Args:
        font_path: Path to the font file

    Returns:
        Tuple of (font_data, skia_typeface, harfbuzz_face)

    Raises:
        FontError: If font data cannot be loaded or Skia/HarfBuzz resources fail to load
    """
    font_data = load_font_data(font_path)

    with _font_cache_lock:
        typeface = _typeface_cache.get(font_path)
        if typeface is None:
            skia_data = skia.Data.MakeWithoutCopy(font_data)
            typeface = skia.Typeface.MakeFromData(skia_data)
            if typeface is None:
                log_message(
                    f"Skia typeface load failed: {os.path.basename(font_path)}",
                    always_print=True,
                )
                raise FontError(
                    f"Failed to create Skia typeface from font: {font_path}"
                )
            _typeface_cache.put(font_path, typeface)

        hb_face = _hb_face_cache.get(font_path)
        if hb_face is None:
            try:
                hb_face = hb.Face(font_data)
                _hb_face_cache.put(font_path, hb_face)
            except Exception as e:
                log_message(
                    f"HarfBuzz face load failed: {os.path.basename(font_path)}: {e}",
                    always_print=True,
                )
                # Keep both caches consistent
                if font_path in _typeface_cache:
                    del _typeface_cache[font_path]
                raise FontError(
                    f"Failed to create HarfBuzz face from font: {font_path}"
                ) from e

    return font_data, typeface, hb_face


def load_system_typeface(family: str) -> skia.Typeface:
    """Asks the platform font manager for a bold face of ``family``."""
    typeface = skia.FontMgr.RefDefault().matchFamilyStyle(family, skia.FontStyle.Bold())
    if typeface is None:
        typeface = skia.Typeface.MakeDefault()
    return typeface


def resolve_bubble_font(config: RenderingConfig, verbose: bool = False) -> BubbleFont:
    """
    Resolves the typeface for bubble text from the rendering config.

    Raises:
        FontError: If a configured font cannot be loaded
    """
    font_path = resolve_font_path(config.font_path, config.font_dir, verbose=verbose)
    if font_path is None:
        log_message(
            f"No font file available, using system '{config.font_family}' bold",
            verbose=verbose,
        )
        return BubbleFont(
            typeface=load_system_typeface(config.font_family), name=config.font_family
        )

    _, typeface, hb_face = load_font_resources(str(font_path))
    return BubbleFont(typeface=typeface, hb_face=hb_face, name=font_path.name)


def skia_color(rgba: Tuple[int, int, int, int]) -> int:
    r, g, b, a = rgba
    return skia.ColorSetARGB(a, r, g, b)


def skia_surface_to_pil(surface: skia.Surface) -> Image.Image:
    """Converts a Skia Surface back to a PIL image.

    Raises:
        RenderingError: If conversion fails
    """
    try:
        skia_image: Optional[skia.Image] = surface.makeImageSnapshot()
        if skia_image is None:
            log_message("Skia surface snapshot failed", always_print=True)
            raise RenderingError("Failed to create Skia image snapshot")

        skia_image = skia_image.convert(
            alphaType=skia.kUnpremul_AlphaType, colorType=skia.kRGBA_8888_ColorType
        )
        return Image.fromarray(skia_image).convert("RGBA")
    except RenderingError:
        raise
    except Exception as e:
        log_message(f"Skia to PIL conversion error: {e}", always_print=True)
        raise RenderingError("Skia to PIL conversion failed") from e


def draw_bubble_outline(
    canvas: skia.Canvas, plan: LayoutPlan, config: RenderingConfig
) -> None:
    """Fills the bubble ellipse and strokes its outline."""
    center_x, center_y = plan.ellipse_center
    radius_x, radius_y = plan.ellipse_radii
    oval = skia.Rect.MakeXYWH(
        center_x - radius_x, center_y - radius_y, radius_x * 2, radius_y * 2
    )

    fill_paint = skia.Paint(
        AntiAlias=True,
        Color=skia_color(config.fill_color),
        Style=skia.Paint.kFill_Style,
    )
    stroke_paint = skia.Paint(
        AntiAlias=True,
        Color=skia_color(config.stroke_color),
        Style=skia.Paint.kStroke_Style,
        StrokeWidth=plan.stroke_width,
    )
    canvas.drawOval(oval, fill_paint)
    canvas.drawOval(oval, stroke_paint)


def _draw_shaped_glyph(
    canvas: skia.Canvas,
    placement: GlyphPlacement,
    center_x: float,
    baseline_y: float,
    skia_font: skia.Font,
    hb_font: hb.Font,
    features: dict,
    paint: skia.Paint,
) -> bool:
    infos, positions = shape_line(placement.character, hb_font, features)
    if not infos:
        return False

    advance = sum(pos.x_advance for pos in positions) / HB_26_6_SCALE_FACTOR
    cursor_x = center_x - advance / 2.0
    glyph_ids = []
    points = []
    for info, pos in zip(infos, positions):
        glyph_ids.append(info.codepoint)
        points.append(
            skia.Point(
                cursor_x + pos.x_offset / HB_26_6_SCALE_FACTOR,
                baseline_y - pos.y_offset / HB_26_6_SCALE_FACTOR,
            )
        )
        cursor_x += pos.x_advance / HB_26_6_SCALE_FACTOR

    builder = skia.TextBlobBuilder()
    builder.allocRunPos(skia_font, glyph_ids, points)
    text_blob = builder.make()
    if not text_blob:
        return False
    canvas.drawTextBlob(text_blob, 0, 0, paint)
    return True


def draw_glyphs(
    canvas: skia.Canvas,
    plan: LayoutPlan,
    bubble_font: BubbleFont,
    config: RenderingConfig,
    verbose: bool = False,
) -> int:
    """
    Draws every glyph placement centred on its position.

    Glyphs are shaped with HarfBuzz when the font came from a file, otherwise
    drawn directly with Skia. Returns the number of glyphs drawn.
    """
    paint = skia.Paint(AntiAlias=True, Color=skia_color(config.text_color))
    skia_font = skia.Font(bubble_font.typeface, config.font_size)
    skia_font.setSubpixel(True)
    metrics = skia_font.getMetrics()
    baseline_shift = -(metrics.fAscent + metrics.fDescent) / 2.0

    hb_font = None
    features = {"vert": config.use_vertical_forms}
    if bubble_font.hb_face is not None:
        hb_font = hb.Font(bubble_font.hb_face)
        hb_font.ptem = float(config.font_size)
        hb_scale = int(config.font_size * HB_26_6_SCALE_FACTOR)
        hb_font.scale = (hb_scale, hb_scale)

    center_x, center_y = plan.ellipse_center
    drawn = 0
    for placement in plan.glyph_placements:
        glyph_x = center_x + placement.x
        baseline_y = center_y + placement.y + baseline_shift

        if hb_font is not None and _draw_shaped_glyph(
            canvas,
            placement,
            glyph_x,
            baseline_y,
            skia_font,
            hb_font,
            features,
            paint,
        ):
            drawn += 1
            continue

        width = skia_font.measureText(placement.character)
        canvas.drawString(
            placement.character, glyph_x - width / 2.0, baseline_y, skia_font, paint
        )
        drawn += 1

    log_message(
        f"Drew {drawn} glyphs with '{bubble_font.name}' at size {config.font_size}",
        verbose=verbose,
    )
    return drawn
