from pathlib import Path
from typing import Any, List, Optional, Tuple

import gradio as gr

from core.config import BubbleConfig, OutputConfig, RenderingConfig
from utils.exceptions import ClipboardError, ValidationError
from utils.logging import log_message

from . import logic, utils

ERROR_PREFIX = utils.ERROR_PREFIX
SUCCESS_PREFIX = utils.SUCCESS_PREFIX


def _clean_error_message(message: Any) -> str:
    """Normalize error text for display and avoid duplicate prefixes/quotes."""
    text = str(message).strip()

    # Strip surrounding quotes if present
    if (len(text) >= 2) and ((text[0] == text[-1] == "'") or (text[0] == text[-1] == '"')):
        text = text[1:-1].strip()

    if text.startswith(ERROR_PREFIX):
        return text
    return f"{ERROR_PREFIX}{text}"


def build_config(
    fonts_base_dir: Path,
    font_pack: Optional[str],
    font_size: float,
    scale_factor: int,
    png_compression: int,
    apply_mask: bool,
    verbose: bool,
) -> BubbleConfig:
    """Maps UI control values onto the backend configuration."""
    font_dir = utils.resolve_font_pack_dir(fonts_base_dir, font_pack)
    if font_dir is not None:
        font_valid, font_msg = utils.validate_font_directory(font_dir)
        if not font_valid:
            raise ValidationError(font_msg)

    return BubbleConfig(
        rendering=RenderingConfig(
            font_dir=str(font_dir) if font_dir is not None else None,
            font_size=float(font_size),
            scale_factor=int(scale_factor),
        ),
        output=OutputConfig(
            png_compression=int(png_compression),
            apply_mask=bool(apply_mask),
        ),
        verbose=bool(verbose),
    )


def _format_generate_message(result: dict) -> str:
    count = result["paragraph_count"]
    success = result["success_count"]
    msg = f"{SUCCESS_PREFIX}Rendered {success}/{count} bubbles in {result['processing_time']:.2f}s"
    if result["missing"]:
        skipped = ", ".join(f"#{i + 1}" for i in result["missing"])
        msg += f"\nSkipped (render failed): {skipped}"
    return msg


def handle_generate_click(
    document: str,
    font_pack: Optional[str],
    font_size: float,
    scale_factor: int,
    png_compression: int,
    apply_mask: bool,
    verbose: bool,
    output_dir: Optional[str],
    *,
    fonts_base_dir: Path,
    progress=gr.Progress(),
) -> Tuple[List[Tuple[Any, str]], Optional[str], str, Any, Optional[str]]:
    """
    Callback for the 'Generate' button and text edits.

    ``output_dir`` is the session's archive directory (a gr.State); it is
    created on first use and reused for every later render of the session.
    """
    valid, msg = utils.validate_document(document)
    if not valid:
        return [], None, msg, gr.update(maximum=1, value=1), output_dir

    try:
        config = build_config(
            fonts_base_dir, font_pack, font_size, scale_factor, png_compression, apply_mask, verbose
        )
        if not output_dir:
            output_dir = utils.create_session_output_dir()
        result = logic.generate_bubbles_logic(
            document, config, output_base_dir=Path(output_dir), gradio_progress=progress
        )
    except (FileNotFoundError, ValidationError) as e:
        raise gr.Error(_clean_error_message(e))
    except Exception as e:
        log_message(f"Unexpected error while generating bubbles: {e}", always_print=True)
        raise gr.Error(_clean_error_message(f"An unexpected error occurred: {e}"))

    archive_path = str(result["archive_path"]) if result["archive_path"] else None
    bubble_count = max(result["paragraph_count"], 1)
    return (
        result["gallery"],
        archive_path,
        _format_generate_message(result),
        gr.update(maximum=bubble_count, value=1),
        output_dir,
    )


def handle_copy_click(
    document: str,
    bubble_number: int,
    font_pack: Optional[str],
    font_size: float,
    scale_factor: int,
    png_compression: int,
    apply_mask: bool,
    verbose: bool,
    *,
    fonts_base_dir: Path,
) -> str:
    """Callback for 'Copy to Clipboard'. Failures only show a transient warning."""
    try:
        config = build_config(
            fonts_base_dir, font_pack, font_size, scale_factor, png_compression, apply_mask, verbose
        )
        logic.copy_bubble_logic(document, bubble_number, config)
    except ClipboardError as e:
        log_message(f"Clipboard copy failed: {e}", always_print=True)
        gr.Warning(f"Could not copy bubble #{bubble_number} to the clipboard: {e}")
        return ""
    except (FileNotFoundError, ValidationError, logic.LogicError) as e:
        log_message(f"Clipboard copy failed: {e}", always_print=True)
        gr.Warning(str(e))
        return ""

    gr.Info(f"Copied bubble #{bubble_number} to the clipboard")
    return f"{SUCCESS_PREFIX}Copied bubble #{bubble_number}"


def handle_clear_click():
    return "", [], None, ""
