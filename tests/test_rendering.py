import numpy as np
import pytest
from PIL import Image

from core.config import LayoutConfig, RenderingConfig
from core.image.image_utils import (apply_elliptical_mask,
                                    elliptical_outside_mask, encode_png)
from core.rendering import render_bubble
from core.text.drawing_engine import resolve_bubble_font
from core.text.layout_engine import compute_layout
from core.text.text_processing import normalize_text
from utils.exceptions import EncodingError


def _scaled_geometry(plan, scale):
    center = (plan.ellipse_center[0] * scale, plan.ellipse_center[1] * scale)
    radii = (plan.ellipse_radii[0] * scale, plan.ellipse_radii[1] * scale)
    return center, radii


@pytest.mark.parametrize("scale", [1, 2])
def test_render_size_follows_scale_factor(scale):
    plan = compute_layout("こんにちは")
    image = render_bubble(plan, config=RenderingConfig(scale_factor=scale))

    assert image.mode == "RGBA"
    assert image.size == (plan.canvas_width * scale, plan.canvas_height * scale)


def test_export_render_is_transparent_outside_ellipse():
    scale = 2
    plan = compute_layout(normalize_text("やばい！？\nまじで"))
    image = render_bubble(plan, export_quality=True, config=RenderingConfig(scale_factor=scale))

    alpha = np.array(image)[:, :, 3]
    outside = elliptical_outside_mask(image.size, *_scaled_geometry(plan, scale))
    assert outside.any()
    assert not alpha[outside].any()

    height, width = alpha.shape
    assert alpha[height // 2, width // 2] == 255


def test_preview_render_keeps_stroke_past_ellipse():
    plan = compute_layout("こんにちは")
    image = render_bubble(plan, export_quality=False, config=RenderingConfig(scale_factor=1))

    alpha = np.array(image)[:, :, 3]
    outside = elliptical_outside_mask(image.size, *_scaled_geometry(plan, 1))
    assert alpha[outside].any()


def test_corners_are_transparent():
    plan = compute_layout("あ")
    image = render_bubble(plan, config=RenderingConfig(scale_factor=1))

    alpha = np.array(image)[:, :, 3]
    for row, col in [(0, 0), (0, -1), (-1, 0), (-1, -1)]:
        assert alpha[row, col] == 0


def test_apply_elliptical_mask_returns_new_image():
    image = Image.new("RGBA", (20, 10), (255, 0, 0, 255))
    masked = apply_elliptical_mask(image, center=(10, 5), radii=(8, 4))

    assert image.getpixel((0, 0)) == (255, 0, 0, 255)
    assert masked.getpixel((0, 0))[3] == 0
    assert masked.getpixel((10, 5)) == (255, 0, 0, 255)


def test_degenerate_radii_mask_everything():
    mask = elliptical_outside_mask((4, 3), center=(2, 1.5), radii=(0, 1))
    assert mask.shape == (3, 4)
    assert mask.all()


def test_encode_png_writes_png_signature():
    png_bytes = encode_png(Image.new("RGBA", (4, 4)), png_compression=9)
    assert png_bytes.startswith(b"\x89PNG\r\n\x1a\n")


def test_encode_png_wraps_failures():
    class BrokenImage:
        size = (1, 1)

        def save(self, *args, **kwargs):
            raise OSError("disk on fire")

    with pytest.raises(EncodingError):
        encode_png(BrokenImage())


def _ink_box(image):
    """(left, top, right, bottom) of the pixels with any alpha, right/bottom exclusive."""
    alpha = np.array(image)[:, :, 3]
    rows = np.flatnonzero(alpha.any(axis=1))
    cols = np.flatnonzero(alpha.any(axis=0))
    assert rows.size and cols.size, "nothing was drawn"
    return cols[0], rows[0], cols[-1] + 1, rows[-1] + 1


def _glyphs_only(font_path):
    transparent = (0, 0, 0, 0)
    return RenderingConfig(
        font_path=font_path, scale_factor=1, fill_color=transparent, stroke_color=transparent
    )


def test_font_file_is_shaped_with_harfbuzz(cjk_font_path):
    bubble_font = resolve_bubble_font(RenderingConfig(font_path=cjk_font_path))
    assert bubble_font.hb_face is not None


def test_vertical_forms_feature_is_off_by_default():
    assert RenderingConfig().use_vertical_forms is False


def test_long_vowel_bar_is_drawn_upright(cjk_font_path):
    plan = compute_layout(normalize_text("ー"))
    image = render_bubble(plan, export_quality=False, config=_glyphs_only(cjk_font_path))

    left, top, right, bottom = _ink_box(image)
    assert bottom - top > right - left


@pytest.mark.parametrize("mark", ["、", "。"])
def test_kutouten_ink_stays_in_its_column(cjk_font_path, mark):
    layout_config = LayoutConfig()
    plan = compute_layout(mark, layout_config)
    image = render_bubble(plan, export_quality=False, config=_glyphs_only(cjk_font_path))

    left, _, right, _ = _ink_box(image)
    center_x = plan.ellipse_center[0]
    half_column = layout_config.line_spacing / 2
    assert center_x - half_column <= left
    assert right <= center_x + half_column
    # Compressed marks sit right of the column centre
    assert (left + right) / 2 > center_x
