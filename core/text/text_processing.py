import re
import unicodedata
from typing import Iterator, List, Tuple

# A preceding kana is taken along so a halfwidth voicing mark composes with it
HALFWIDTH_KATAKANA_PATTERN = re.compile(r"[\u3041-\u30ff]?[\uff61-\uff9f]+")
ASCII_ALNUM_PATTERN = re.compile(r"[A-Za-z0-9]")
PARAGRAPH_BREAK_PATTERN = re.compile(r"\n\s*\n")
LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n")

FULLWIDTH_OFFSET = 0xFEE0
VARIATION_SELECTORS = range(0xFE00, 0xFE10)

TEXT_STYLE = "\ufe0e"  # text presentation selector
INTERROBANG = "\u2049" + TEXT_STYLE
DOUBLE_EXCLAMATION = "\u203c" + TEXT_STYLE
VERTICAL_ELLIPSIS = "・・・"

# Applied in order; each rule sees the output of the previous one.
PUNCTUATION_RULES: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"[！!][？?]"), INTERROBANG),
    (re.compile(r"[！!]{2,}"), DOUBLE_EXCLAMATION),
    (re.compile(r"[！!]"), "!"),
    (re.compile(r"[？?]"), "?"),
]

# Replaced on the first match only.
ELLIPSIS_RULES: List[Tuple[str, str]] = [
    ("...", VERTICAL_ELLIPSIS),
    ("…", VERTICAL_ELLIPSIS),
]

VERTICAL_FORMS = {
    "ー": "｜",
    "〜": "≀",
    "(": "︵",
    "（": "︵",
    ")": "︶",
    "）": "︶",
}
_VERTICAL_FORMS_TABLE = str.maketrans(VERTICAL_FORMS)

KUTOUTEN = frozenset("、。")
COMPOUND_SYMBOLS = frozenset([INTERROBANG, DOUBLE_EXCLAMATION, "\u2049", "\u203c"])


def to_fullwidth_katakana(text: str) -> str:
    """Maps halfwidth katakana runs to their fullwidth forms.

    The halfwidth block is not laid out in fullwidth order, so NFKC is used
    instead of an offset. It also folds ﾞ/ﾟ into the kana before it, halfwidth
    or not; a mark with no kana before it stays a combining mark.
    """
    return HALFWIDTH_KATAKANA_PATTERN.sub(
        lambda m: unicodedata.normalize("NFKC", m.group(0)), text
    )


def canonicalize_punctuation(text: str) -> str:
    for pattern, replacement in PUNCTUATION_RULES:
        text = pattern.sub(replacement, text)
    for needle, replacement in ELLIPSIS_RULES:
        text = text.replace(needle, replacement, 1)
    return text.translate(_VERTICAL_FORMS_TABLE)


def to_fullwidth_alnum(text: str) -> str:
    return ASCII_ALNUM_PATTERN.sub(
        lambda m: chr(ord(m.group(0)) + FULLWIDTH_OFFSET), text
    )


def normalize_text(text: str) -> str:
    """
    Converts raw input into the glyph forms used for vertical manga lettering.

    Args:
        text (str): Raw paragraph text. Any string is accepted, including "".

    Returns:
        str: Normalized text. Its length may differ from the input.
    """
    text = to_fullwidth_katakana(text)
    text = canonicalize_punctuation(text)
    return to_fullwidth_alnum(text)


def split_paragraphs(document: str) -> List[str]:
    """Splits a document on blank lines into trimmed, non-empty paragraphs."""
    blocks = PARAGRAPH_BREAK_PATTERN.split(document.replace("\r\n", "\n"))
    return [block.strip() for block in blocks if block.strip()]


def split_lines(text: str) -> List[str]:
    return LINE_BREAK_PATTERN.split(text)


def iter_glyph_clusters(line: str) -> Iterator[str]:
    """Yields display characters, keeping variation selectors and combining
    marks on their base."""
    cluster = ""
    for ch in line:
        if cluster and (ord(ch) in VARIATION_SELECTORS or unicodedata.combining(ch)):
            cluster += ch
            continue
        if cluster:
            yield cluster
        cluster = ch
    if cluster:
        yield cluster


def is_kutouten(cluster: str) -> bool:
    return cluster in KUTOUTEN


def is_compound_symbol(cluster: str) -> bool:
    return cluster in COMPOUND_SYMBOLS
