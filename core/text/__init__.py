"""
Text processing and rendering modules for the bubble generator.

This subpackage contains modules for:
- Japanese text normalization for vertical lettering
- Font management and loading
- Vertical layout engine for bubble geometry and glyph placement
- Drawing engine using Skia and HarfBuzz
"""

from .drawing_engine import (
    BubbleFont,
    draw_bubble_outline,
    draw_glyphs,
    load_font_resources,
    resolve_bubble_font,
    skia_surface_to_pil,
)
from .font_manager import LRUCache, find_font_file, load_font_data, resolve_font_path
from .layout_engine import (
    GlyphPlacement,
    LayoutPlan,
    compute_layout,
    ellipse_contains,
    shape_line,
)
from .text_processing import (
    iter_glyph_clusters,
    normalize_text,
    split_lines,
    split_paragraphs,
)

__all__ = [
    "BubbleFont",
    "draw_bubble_outline",
    "draw_glyphs",
    "load_font_resources",
    "resolve_bubble_font",
    "skia_surface_to_pil",
    "LRUCache",
    "find_font_file",
    "load_font_data",
    "resolve_font_path",
    "GlyphPlacement",
    "LayoutPlan",
    "compute_layout",
    "ellipse_contains",
    "shape_line",
    "iter_glyph_clusters",
    "normalize_text",
    "split_lines",
    "split_paragraphs",
]
