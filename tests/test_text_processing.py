import pytest

from core.text.text_processing import (DOUBLE_EXCLAMATION, INTERROBANG,
                                       iter_glyph_clusters, normalize_text,
                                       split_lines, split_paragraphs,
                                       to_fullwidth_katakana)

KATAKANA_BLOCK = range(0x30A0, 0x3100)


def test_halfwidth_katakana_maps_into_katakana_block():
    for code in range(0xFF66, 0xFF9E):
        converted = to_fullwidth_katakana(chr(code))
        assert len(converted) == 1
        assert ord(converted) in KATAKANA_BLOCK, hex(code)


def test_halfwidth_katakana_in_sentence():
    assert normalize_text("ｶﾀｶﾅです") == "カタカナです"


def test_halfwidth_voiced_mark_folds_into_base():
    assert normalize_text("ｶﾞｯﾂ") == "ガッツ"


def test_halfwidth_voiced_mark_after_hiragana_composes():
    assert normalize_text("\u304b\uff9e") == "\u304c"
    assert normalize_text("\u306f\uff9f") == "\u3071"


def test_lone_voiced_mark_stays_in_previous_cell():
    normalized = normalize_text("A\uff9e")

    assert normalized == "\uff21\u3099"
    assert list(iter_glyph_clusters(normalized)) == ["\uff21\u3099"]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("！?", INTERROBANG),
        ("!?", INTERROBANG),
        ("！？", INTERROBANG),
        ("!！", DOUBLE_EXCLAMATION),
        ("！！！", DOUBLE_EXCLAMATION),
        ("！", "!"),
        ("？", "?"),
    ],
)
def test_exclamation_and_question_marks(raw, expected):
    assert normalize_text(raw) == expected


def test_interrobang_wins_over_double_exclamation():
    # The first pair becomes the interrobang, the leftover mark stays single
    assert normalize_text("!!?") == "!" + INTERROBANG


def test_only_first_ellipsis_is_converted():
    assert normalize_text("あ...い...う") == "あ・・・い...う"
    assert normalize_text("あ…い…う") == "あ・・・い…う"


def test_vertical_forms():
    assert normalize_text("ー〜（)") == "｜≀︵︶"


def test_ascii_alnum_goes_fullwidth():
    assert normalize_text("ABC123xyz") == "ＡＢＣ１２３ｘｙｚ"
    assert normalize_text("a-b") == "ａ-ｂ"


def test_empty_text():
    assert normalize_text("") == ""


@pytest.mark.parametrize(
    "raw",
    [
        "こんにちは",
        "やばい！？",
        "ｶﾀｶﾅ！！",
        "ちょっと...待って",
        "（ABC）ー〜",
        "え？本当！",
        "行くぞ\n今すぐ！",
    ],
)
def test_normalize_is_idempotent(raw):
    once = normalize_text(raw)
    assert normalize_text(once) == once


def test_split_paragraphs_on_blank_lines():
    document = "こんにちは\n\n  \nやばい！？\r\n\r\n二行目\nの段落\n\n\n"
    assert split_paragraphs(document) == ["こんにちは", "やばい！？", "二行目\nの段落"]


def test_split_paragraphs_empty_document():
    assert split_paragraphs("") == []
    assert split_paragraphs("\n \n\t\n") == []


def test_split_lines_handles_all_newlines():
    assert split_lines("あ\nい\r\nう\rえ") == ["あ", "い", "う", "え"]


def test_variation_selector_stays_with_base_character():
    clusters = list(iter_glyph_clusters("ま" + INTERROBANG + "a"))
    assert clusters == ["ま", INTERROBANG, "a"]
