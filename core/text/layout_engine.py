import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import uharfbuzz as hb

from core.config import LayoutConfig
from core.text.text_processing import (is_compound_symbol, is_kutouten,
                                       iter_glyph_clusters, split_lines)


@dataclass(frozen=True)
class GlyphPlacement:
    """One character of a vertical column.

    ``column`` counts from the rightmost column. ``row_offset`` is the cell
    cursor measured from the top of the column; ``x``/``y`` are the glyph
    centre relative to the canvas centre (y grows downward).
    """

    character: str
    column: int
    row_offset: float
    x: float
    y: float
    is_punctuation_compressed: bool = False
    is_compound_symbol: bool = False


@dataclass(frozen=True)
class LayoutPlan:
    canvas_width: int
    canvas_height: int
    ellipse_center: Tuple[float, float]
    ellipse_radii: Tuple[float, float]
    stroke_width: float
    line_count: int
    max_chars: int
    glyph_placements: Tuple[GlyphPlacement, ...]

    @property
    def canvas_size(self) -> Tuple[int, int]:
        return self.canvas_width, self.canvas_height


def ceil_px(value: float) -> int:
    """Rounds up to a whole pixel, ignoring float noise such as 182.00000000000003."""
    return math.ceil(round(value, 6))


def measure_text_block(
    lines: List[str], config: LayoutConfig
) -> Tuple[int, int, int, int]:
    """
    Returns (line_count, max_chars, text_width, text_height) for a block of
    vertical columns, with the safety margin applied and rounded up.
    """
    line_count = max(len(lines), 1)
    max_chars = max((len(list(iter_glyph_clusters(line))) for line in lines), default=0)

    base_text_height = max_chars * config.char_height
    base_text_width = line_count * config.line_spacing
    text_height = ceil_px(base_text_height * config.safety_margin)
    text_width = ceil_px(base_text_width * config.safety_margin)
    return line_count, max_chars, text_width, text_height


def place_column(
    line: str,
    column: int,
    column_x: float,
    start_y: float,
    config: LayoutConfig,
) -> List[GlyphPlacement]:
    """Walks one column top to bottom and places each character."""
    char_height = config.char_height
    placements: List[GlyphPlacement] = []
    cursor = 0.0

    for cluster in iter_glyph_clusters(line):
        if is_kutouten(cluster):
            # Tucked into the upper-right quadrant of the previous cell
            placements.append(
                GlyphPlacement(
                    character=cluster,
                    column=column,
                    row_offset=cursor,
                    x=column_x + char_height * config.compressed_offset_x,
                    y=start_y + cursor - char_height
                    + char_height * config.compressed_offset_y,
                    is_punctuation_compressed=True,
                )
            )
            cursor += char_height * config.compressed_advance
            continue

        placements.append(
            GlyphPlacement(
                character=cluster,
                column=column,
                row_offset=cursor,
                x=column_x,
                y=start_y + cursor,
                is_compound_symbol=is_compound_symbol(cluster),
            )
        )
        cursor += char_height

    return placements


def compute_layout(text: str, config: Optional[LayoutConfig] = None) -> LayoutPlan:
    """
    Computes bubble geometry and glyph positions for normalized text.

    Each line of ``text`` becomes one vertical column; the first line is the
    rightmost column. Never fails: empty text yields a margins-only bubble.

    Args:
        text (str): Normalized paragraph text.
        config (LayoutConfig): Layout constants in logical pixels.

    Returns:
        LayoutPlan: Canvas size, ellipse geometry and ordered placements.
    """
    config = config or LayoutConfig()
    lines = split_lines(text)

    line_count, max_chars, text_width, text_height = measure_text_block(lines, config)

    canvas_width = text_width + config.horizontal_margin * 2
    canvas_height = text_height + config.vertical_margin * 2

    center_x = canvas_width / 2.0
    center_y = canvas_height / 2.0
    radius_x = (canvas_width - config.stroke_width) / 2.0
    radius_y = (canvas_height - config.stroke_width) / 2.0

    start_x = (line_count - 1) * config.line_spacing / 2.0
    start_y = -(max_chars * config.char_height) / 2.0 + config.char_height / 2.0

    placements: List[GlyphPlacement] = []
    for column, line in enumerate(lines):
        column_x = start_x - column * config.line_spacing
        placements.extend(place_column(line, column, column_x, start_y, config))

    return LayoutPlan(
        canvas_width=canvas_width,
        canvas_height=canvas_height,
        ellipse_center=(center_x, center_y),
        ellipse_radii=(radius_x, radius_y),
        stroke_width=config.stroke_width,
        line_count=line_count,
        max_chars=max_chars,
        glyph_placements=tuple(placements),
    )


def ellipse_contains(
    plan: LayoutPlan, x: float, y: float, inset: float = 0.0, shrink: float = 1.0
) -> bool:
    """Tests a point (relative to the canvas centre) against the bubble ellipse,
    with its radii divided by ``shrink`` and then reduced by ``inset``."""
    radius_x = plan.ellipse_radii[0] / shrink - inset
    radius_y = plan.ellipse_radii[1] / shrink - inset
    if radius_x <= 0 or radius_y <= 0:
        return False
    return (x / radius_x) ** 2 + (y / radius_y) ** 2 <= 1.0


def shape_line(
    text: str, hb_font: hb.Font, features: Dict[str, bool]
) -> Tuple[List[hb.GlyphInfo], List[hb.GlyphPosition]]:
    """Shapes a string with HarfBuzz and returns glyph infos and positions."""
    hb_buffer = hb.Buffer()
    hb_buffer.add_str(text)
    hb_buffer.guess_segment_properties()
    hb.shape(hb_font, hb_buffer, features)
    return hb_buffer.glyph_infos, hb_buffer.glyph_positions
