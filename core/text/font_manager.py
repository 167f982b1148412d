import os
import threading
from collections import OrderedDict
from pathlib import Path
from typing import Optional

from utils.exceptions import FontError
from utils.logging import log_message

FONT_EXTENSIONS = (".ttf", ".otf", ".ttc")

# Bold Japanese gothic faces, tried in order
SYSTEM_FONT_CANDIDATES = [
    Path("/usr/share/fonts/opentype/noto/NotoSansCJK-Bold.ttc"),
    Path("/usr/share/fonts/noto-cjk/NotoSansCJK-Bold.ttc"),
    Path("/usr/share/fonts/google-noto-cjk/NotoSansCJK-Bold.ttc"),
    Path("/System/Library/Fonts/ヒラギノ角ゴシック W6.ttc"),
    Path("C:/Windows/Fonts/msgothic.ttc"),
]


class LRUCache:
    """Simple LRU cache implementation to prevent unbounded memory growth."""

    def __init__(self, max_size: int = 100):
        self.max_size = max_size
        self.cache = OrderedDict()

    def get(self, key):
        if key in self.cache:
            # Move to end (most recently used)
            value = self.cache.pop(key)
            self.cache[key] = value
            return value
        return None

    def put(self, key, value):
        if key in self.cache:
            self.cache.pop(key)
        elif len(self.cache) >= self.max_size:
            # Remove least recently used (first item)
            self.cache.popitem(last=False)
        self.cache[key] = value

    def __contains__(self, key):
        return key in self.cache

    def __delitem__(self, key):
        if key in self.cache:
            del self.cache[key]


_font_data_cache = LRUCache(max_size=20)
_font_data_lock = threading.Lock()


def load_font_data(font_path: str) -> bytes:
    """
    Reads a font file into memory, using LRU caching.

    Raises:
        FontError: If the file is missing or unreadable
    """
    with _font_data_lock:
        font_data = _font_data_cache.get(font_path)
        if font_data is not None:
            return font_data

        try:
            with open(font_path, "rb") as f:
                font_data = f.read()
        except OSError as e:
            log_message(
                f"Font file read failed: {os.path.basename(font_path)}: {e}",
                always_print=True,
            )
            raise FontError(f"Failed to read font file: {font_path}") from e

        if not font_data:
            raise FontError(f"Font file is empty: {font_path}")

        _font_data_cache.put(font_path, font_data)
        return font_data


def find_font_file(font_dir: Path) -> Optional[Path]:
    """Returns the first font file in a directory, preferring bold variants."""
    if not font_dir.is_dir():
        return None

    font_files = sorted(
        p for p in font_dir.iterdir() if p.suffix.lower() in FONT_EXTENSIONS
    )
    if not font_files:
        return None

    for font_file in font_files:
        stem = font_file.stem.lower()
        if "bold" in stem or "heavy" in stem or "black" in stem:
            return font_file
    return font_files[0]


def resolve_font_path(
    font_path: Optional[str], font_dir: Optional[str], verbose: bool = False
) -> Optional[Path]:
    """
    Picks the font file for rendering: an explicit path, then a font directory,
    then well-known system locations. Returns None if nothing is available.

    Raises:
        FontError: If an explicitly configured path or directory has no usable font
    """
    if font_path:
        path = Path(font_path)
        if not path.is_file():
            raise FontError(f"Font file not found: {font_path}")
        return path

    if font_dir:
        path = find_font_file(Path(font_dir))
        if path is None:
            raise FontError(f"No font files (.ttf, .otf or .ttc) found in: {font_dir}")
        log_message(f"Using font from font directory: {path.name}", verbose=verbose)
        return path

    for candidate in SYSTEM_FONT_CANDIDATES:
        if candidate.is_file():
            log_message(f"Using system font: {candidate}", verbose=verbose)
            return candidate

    return None
