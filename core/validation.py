from pathlib import Path
from typing import Any

from core.config import BubbleConfig, LayoutConfig, OutputConfig, RenderingConfig
from utils.exceptions import ValidationError


def _is_positive_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def validate_layout_config(layout_cfg: LayoutConfig) -> None:
    """
    Validates layout constants.

    Raises:
        ValidationError: If any size is non-positive or the safety margin is below 1
    """
    for name in ("char_height", "line_spacing", "stroke_width"):
        if not _is_positive_number(getattr(layout_cfg, name)):
            raise ValidationError(f"{name} must be a positive number.")
    for name in ("horizontal_margin", "vertical_margin"):
        value = getattr(layout_cfg, name)
        if not isinstance(value, (int, float)) or value < 0:
            raise ValidationError(f"{name} must be zero or a positive number.")
    if not (_is_positive_number(layout_cfg.safety_margin) and layout_cfg.safety_margin >= 1.0):
        raise ValidationError("Safety margin must be at least 1.0.")
    if not (0 < layout_cfg.compressed_advance <= 1.0):
        raise ValidationError("Compressed punctuation advance must be in (0, 1].")


def validate_rendering_config(rendering_cfg: RenderingConfig) -> None:
    """
    Validates rendering settings, including configured font locations.

    Raises:
        FileNotFoundError: If a configured font file or directory does not exist
        ValidationError: If a numeric setting is invalid
    """
    if not _is_positive_number(rendering_cfg.font_size):
        raise ValidationError("Font size must be a positive number.")
    if not (isinstance(rendering_cfg.scale_factor, int) and rendering_cfg.scale_factor > 0):
        raise ValidationError("Scale factor must be a positive integer.")

    if rendering_cfg.font_path and not Path(rendering_cfg.font_path).is_file():
        raise FileNotFoundError(f"Font file not found: {rendering_cfg.font_path}")
    if rendering_cfg.font_dir and not Path(rendering_cfg.font_dir).is_dir():
        raise FileNotFoundError(f"Font directory not found: {rendering_cfg.font_dir}")


def validate_output_config(output_cfg: OutputConfig) -> None:
    """
    Validates output settings.

    Raises:
        ValidationError: If the PNG compression level or names are invalid
    """
    if not (isinstance(output_cfg.png_compression, int) and 0 <= output_cfg.png_compression <= 9):
        raise ValidationError("PNG compression must be an integer between 0 and 9.")
    if not output_cfg.archive_name:
        raise ValidationError("Archive name cannot be empty.")
    if "{number}" not in output_cfg.entry_template:
        raise ValidationError("Entry name template must contain '{number}'.")


def validate_config(config: BubbleConfig) -> None:
    """
    Validates the BubbleConfig object.

    Raises:
        FileNotFoundError: If configured font paths do not exist
        ValidationError: If invalid configuration is detected
    """
    validate_layout_config(config.layout)
    validate_rendering_config(config.rendering)
    validate_output_config(config.output)
