import pytest

from core.config import LayoutConfig
from core.text.layout_engine import ceil_px, compute_layout, ellipse_contains
from core.text.text_processing import normalize_text

SAMPLE_CHARS = "あいうえおかきくけこ"


def test_single_line_geometry():
    plan = compute_layout("こんにちは")

    assert plan.line_count == 1
    assert plan.max_chars == 5
    assert plan.canvas_size == (83, 212)
    assert plan.ellipse_center == (41.5, 106.0)
    assert plan.ellipse_radii == (39.5, 104.0)
    assert [p.x for p in plan.glyph_placements] == [0.0] * 5
    assert [p.y for p in plan.glyph_placements] == [-56.0, -28.0, 0.0, 28.0, 56.0]


def test_empty_text_gives_margins_only_bubble():
    plan = compute_layout("")

    assert plan.line_count == 1
    assert plan.max_chars == 0
    assert plan.canvas_size == (83, 30)
    assert plan.glyph_placements == ()


def test_first_line_is_rightmost_column():
    plan = compute_layout("あ\nい")

    first, second = plan.glyph_placements
    assert (first.character, first.column, first.x) == ("あ", 0, 17.0)
    assert (second.character, second.column, second.x) == ("い", 1, -17.0)


def test_kutouten_is_compressed_into_previous_cell():
    plan = compute_layout("あ。い")

    before, mark, after = plan.glyph_placements
    assert before.y == -28.0
    assert mark.is_punctuation_compressed
    assert mark.x == pytest.approx(12.6)
    assert mark.y == pytest.approx(-14.0)
    assert after.row_offset == pytest.approx(28 + 28 * 0.7)
    assert after.y == pytest.approx(19.6)


def test_compound_symbol_takes_a_full_cell():
    plan = compute_layout(normalize_text("やばい！？"))

    assert plan.max_chars == 4
    last = plan.glyph_placements[-1]
    assert last.is_compound_symbol
    assert last.y == 42.0
    assert not any(p.is_compound_symbol for p in plan.glyph_placements[:-1])


def test_longest_line_sets_height():
    plan = compute_layout("あいうえお\nか")
    assert plan.max_chars == 5
    assert plan.canvas_height == compute_layout("あいうえお").canvas_height


def test_canvas_grows_with_text():
    widths = {}
    for line_count in range(1, 5):
        previous_height = 0
        for char_count in range(0, 13):
            plan = compute_layout("\n".join(["あ" * char_count] * line_count))
            assert plan.canvas_height >= previous_height
            previous_height = plan.canvas_height

            widths[(line_count, char_count)] = plan.canvas_width
            if line_count > 1:
                assert plan.canvas_width > widths[(line_count - 1, char_count)]


def test_scaled_constants_change_geometry():
    config = LayoutConfig(char_height=40, line_spacing=50)
    plan = compute_layout("あい", config)

    assert plan.canvas_height == ceil_px(80 * 1.3) + 30
    assert plan.canvas_width == ceil_px(50 * 1.3) + 38


def _sample_texts():
    for line_count in range(1, 5):
        for char_count in range(1, 11):
            column = SAMPLE_CHARS[:char_count]
            yield "\n".join([column] * line_count)
            yield "\n".join(["。" + column[1:]] * line_count)
            yield "\n".join([column[:-1] + "、"] * line_count)


@pytest.mark.parametrize("text", list(_sample_texts()))
def test_glyph_centres_stay_inside_bubble(text):
    plan = compute_layout(text)
    for placement in plan.glyph_placements:
        assert ellipse_contains(plan, placement.x, placement.y, inset=plan.stroke_width), (
            placement
        )


def test_ellipse_contains_rejects_corners():
    plan = compute_layout("こんにちは")
    half_width = plan.canvas_width / 2
    half_height = plan.canvas_height / 2

    assert ellipse_contains(plan, 0, 0)
    assert not ellipse_contains(plan, half_width, half_height)
    assert not ellipse_contains(plan, -half_width, -half_height)


def test_ceil_px_ignores_float_noise():
    assert ceil_px(140 * 1.3) == 182
    assert ceil_px(44.2) == 45


def _single_column_texts():
    for char_count in range(1, 13):
        column = (SAMPLE_CHARS * 2)[:char_count]
        yield column
        if char_count > 1:
            yield column[:-1] + "、"
            yield column[: char_count // 2] + "。" + column[char_count // 2:]


@pytest.mark.parametrize("text", list(_single_column_texts()))
def test_single_column_clears_safety_margin(text):
    config = LayoutConfig()
    plan = compute_layout(text, config)
    for placement in plan.glyph_placements:
        assert ellipse_contains(
            plan, placement.x, placement.y, shrink=config.safety_margin
        ), placement


def test_shrink_tightens_ellipse():
    plan = compute_layout("こんにちは")
    edge_y = plan.ellipse_radii[1] * 0.9

    assert ellipse_contains(plan, 0, edge_y)
    assert not ellipse_contains(plan, 0, edge_y, shrink=1.3)


def test_combining_mark_shares_its_base_cell():
    plan = compute_layout("\u3042\u3099\u3044")

    assert plan.max_chars == 2
    assert plan.glyph_placements[0].character == "\u3042\u3099"
