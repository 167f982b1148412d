import io
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from PIL import Image

from core.archive import archive_entry_name, write_archive
from core.clipboard import copy_image_to_clipboard
from core.config import BubbleConfig
from core.pipeline import generate_bubble, generate_bubbles
from core.text.text_processing import split_paragraphs
from core.validation import validate_config
from utils.exceptions import (EncodingError, FontError, RenderingError,
                              ValidationError)
from utils.logging import log_message


class LogicError(Exception):
    pass


_default_output_dir: Optional[tempfile.TemporaryDirectory] = None
_default_output_lock = threading.Lock()


def default_output_dir() -> Path:
    """Process-wide scratch directory for archives, removed when the process exits."""
    global _default_output_dir
    with _default_output_lock:
        if _default_output_dir is None:
            _default_output_dir = tempfile.TemporaryDirectory(prefix="bubbles_")
        return Path(_default_output_dir.name)


def generate_bubbles_logic(
    document: str,
    config: BubbleConfig,
    output_base_dir: Optional[Path] = None,
    gradio_progress: Any = None,
) -> Dict[str, Any]:
    """
    Splits a document into paragraphs, renders one bubble each and packs the
    resolved bubbles into a zip archive.

    Args:
        document: Full text area contents; blank lines separate bubbles.
        config: The main configuration object.
        output_base_dir: Directory for the archive; the shared scratch directory if None.
            An existing archive there is replaced.
        gradio_progress: Optional Gradio Progress object for UI updates.

    Returns:
        A dictionary containing processing results:
        {
            "gallery": List[Tuple[Image.Image, str]],
            "paragraph_count": int,
            "success_count": int,
            "missing": List[int],
            "archive_path": Optional[Path],
            "processing_time": float
        }

    Raises:
        FileNotFoundError: If a configured font location does not exist.
        ValidationError: If the document is empty or the configuration is invalid.
    """
    start_time = time.time()
    validate_config(config)

    paragraphs = split_paragraphs(document or "")
    if not paragraphs:
        raise ValidationError("No text to render. Separate bubbles with a blank line.")

    def _progress(value, desc="Rendering..."):
        if gradio_progress is not None:
            gradio_progress(value, desc=desc)
        elif config.verbose:
            log_message(f"Progress: {desc} [{value * 100:.1f}%]", verbose=True)

    results = generate_bubbles(paragraphs, config, progress_callback=_progress)

    gallery: List[Tuple[Image.Image, str]] = []
    for index, png_bytes in results.items():
        image = Image.open(io.BytesIO(png_bytes))
        image.load()
        gallery.append((image, archive_entry_name(index, config.output.entry_template)))

    archive_path = None
    if len(results):
        if output_base_dir is None:
            output_base_dir = default_output_dir()
        archive_path = write_archive(
            results,
            output_base_dir / config.output.archive_name,
            entry_template=config.output.entry_template,
            verbose=config.verbose,
        )

    return {
        "gallery": gallery,
        "paragraph_count": len(paragraphs),
        "success_count": len(results),
        "missing": results.missing(),
        "archive_path": archive_path,
        "processing_time": time.time() - start_time,
    }


def copy_bubble_logic(document: str, bubble_number: int, config: BubbleConfig) -> int:
    """
    Re-renders one bubble and writes it to the clipboard.

    Args:
        document: Full text area contents.
        bubble_number: 1-based bubble position.
        config: The main configuration object.

    Returns:
        Number of bytes copied.

    Raises:
        ValidationError: If the bubble number does not exist.
        LogicError: If the bubble cannot be rendered.
        ClipboardError: If the clipboard write fails.
    """
    paragraphs = split_paragraphs(document or "")
    index = int(bubble_number) - 1
    if not 0 <= index < len(paragraphs):
        raise ValidationError(
            f"Bubble #{bubble_number} does not exist (there are {len(paragraphs)})."
        )

    try:
        png_bytes = generate_bubble(paragraphs[index], index, config)
    except (FontError, RenderingError, EncodingError) as e:
        raise LogicError(f"Bubble rendering failed: {str(e)}") from e

    copy_image_to_clipboard(png_bytes, verbose=config.verbose)
    return len(png_bytes)
