from pathlib import Path

import pytest

from core.config import BubbleConfig, OutputConfig, RenderingConfig
from core.text import font_manager


@pytest.fixture
def small_config():
    """Fast settings for tests that render: no supersampling, light compression."""
    return BubbleConfig(
        rendering=RenderingConfig(scale_factor=1),
        output=OutputConfig(png_compression=1),
    )


CJK_FONT_NAME_HINTS = (
    "ipaex", "ipag", "notosanscjk", "notosansjp", "takao", "vl-gothic", "msgothic", "hiragino",
)
FONT_SEARCH_DIRS = [
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path.home() / ".fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("C:/Windows/Fonts"),
]


def _find_cjk_font():
    for candidate in font_manager.SYSTEM_FONT_CANDIDATES:
        if candidate.is_file():
            return candidate
    for search_dir in FONT_SEARCH_DIRS:
        if not search_dir.is_dir():
            continue
        for path in sorted(search_dir.rglob("*")):
            name = path.name.lower()
            if path.suffix.lower() in font_manager.FONT_EXTENSIONS and any(
                hint in name for hint in CJK_FONT_NAME_HINTS
            ):
                return path
    return None


@pytest.fixture(scope="session")
def cjk_font_path():
    """A Japanese font file installed on this machine; skips the test if there is none."""
    font_path = _find_cjk_font()
    if font_path is None:
        pytest.skip("no Japanese font file installed")
    return str(font_path)
