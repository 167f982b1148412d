from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass
class LayoutConfig:
    """Configuration for vertical bubble layout (logical pixels)."""

    char_height: int = 28
    line_spacing: int = 34
    stroke_width: int = 4
    horizontal_margin: int = 19
    vertical_margin: int = 15
    safety_margin: float = 1.3
    compressed_advance: float = 0.7  # 、。 advance as a fraction of char_height
    compressed_offset_x: float = 0.45
    compressed_offset_y: float = 0.5


@dataclass
class RenderingConfig:
    """Configuration for drawing bubbles."""

    font_path: Optional[str] = None
    font_dir: Optional[str] = None
    font_family: str = "sans-serif"
    font_size: float = 24.0
    scale_factor: int = 4  # supersampling
    # HarfBuzz 'vert' feature; normalized text and 、。 offsets are already vertical
    use_vertical_forms: bool = False
    fill_color: Tuple[int, int, int, int] = (255, 255, 255, 255)
    stroke_color: Tuple[int, int, int, int] = (0, 0, 0, 255)
    text_color: Tuple[int, int, int, int] = (0, 0, 0, 255)


@dataclass
class OutputConfig:
    """Configuration for encoding and packaging bubbles."""

    png_compression: int = 6
    archive_name: str = "bubbles.zip"
    entry_template: str = "bubble_{number}.png"
    apply_mask: bool = True


@dataclass
class BubbleConfig:
    """Main configuration for the bubble generation pipeline."""

    layout: LayoutConfig = field(default_factory=LayoutConfig)
    rendering: RenderingConfig = field(default_factory=RenderingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    verbose: bool = False
