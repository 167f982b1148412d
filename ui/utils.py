import shutil
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple

import gradio as gr

from core.text.font_manager import FONT_EXTENSIONS

ERROR_PREFIX = "❌ Error: "
SUCCESS_PREFIX = "✅ "
SYSTEM_FONT_CHOICE = "System (bold sans-serif)"


def get_available_font_packs(fonts_base_dir: Path) -> Tuple[List[str], Optional[str]]:
    """Get list of available font packs (subdirectories) in the fonts directory"""
    if not fonts_base_dir.exists():
        return [SYSTEM_FONT_CHOICE], SYSTEM_FONT_CHOICE
    font_dirs = [d.name for d in fonts_base_dir.iterdir() if d.is_dir()]
    font_dirs.sort()

    default_font = font_dirs[0] if font_dirs else SYSTEM_FONT_CHOICE
    return font_dirs + [SYSTEM_FONT_CHOICE], default_font


def resolve_font_pack_dir(fonts_base_dir: Path, font_pack: Optional[str]) -> Optional[Path]:
    """Maps a font pack dropdown value to its directory, or None for system fonts."""
    if not font_pack or font_pack == SYSTEM_FONT_CHOICE:
        return None
    return fonts_base_dir / font_pack


def validate_font_directory(font_dir: Path) -> tuple[bool, str]:
    """Validate that the font directory contains at least one font file"""
    if not font_dir.exists():
        return (
            False,
            f"Font directory '{font_dir.name}' not found at {font_dir.resolve()}",
        )
    if not font_dir.is_dir():
        return False, f"Path '{font_dir.name}' is not a directory."

    font_files = [p for p in font_dir.iterdir() if p.suffix.lower() in FONT_EXTENSIONS]
    if not font_files:
        return (
            False,
            f"No font files (.ttf, .otf or .ttc) found in '{font_dir.name}' directory",
        )

    return True, f"Found {len(font_files)} font files in directory"


def validate_document(document: Optional[str]) -> tuple[bool, str]:
    """Validate the text area contents"""
    if document is None or not document.strip():
        return False, "Please enter some text. Separate bubbles with a blank line."
    return True, "Text is valid"


def create_session_output_dir() -> str:
    """Creates the directory that holds one browser session's archive"""
    return tempfile.mkdtemp(prefix="bubbles_session_")


def remove_session_output_dir(output_dir: Optional[str]) -> None:
    """Deletes a session's output directory once the session ends"""
    if output_dir:
        shutil.rmtree(output_dir, ignore_errors=True)


def update_font_dropdown(fonts_base_dir: Path):
    """Update the font pack dropdown list"""
    font_choices, default_font = get_available_font_packs(fonts_base_dir)
    return gr.update(choices=font_choices, value=default_font)
