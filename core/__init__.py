"""
Manga Bubble Generator Core Package

This package turns paragraphs of Japanese text into vertical-text manga
speech-bubble images and packages them into a zip archive.
"""

from .archive import build_archive, write_archive
from .pipeline import BubbleResults, generate_bubble, generate_bubbles
from .rendering import render_bubble
from .text.layout_engine import compute_layout
from .text.text_processing import normalize_text, split_paragraphs

__version__ = "1.0.0"
__version_info__ = (1, 0, 0)
__description__ = "Vertical Japanese speech-bubble image generator"
__all__ = [
    'normalize_text',
    'split_paragraphs',
    'compute_layout',
    'render_bubble',
    'generate_bubble',
    'generate_bubbles',
    'BubbleResults',
    'build_archive',
    'write_archive',
]
