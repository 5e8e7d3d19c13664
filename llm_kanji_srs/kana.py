"""
Romaji to hiragana input assistance.

Romaji typed in UPPERCASE is converted to hiragana with a greedy
longest-match pass over a single fixed table. Single vowels are only
converted when doubled (``AA`` -> あ), so lowercase English and stray
letters pass through untouched.
"""
import types
from typing import Dict, Iterable, Mapping, Tuple

MAX_TOKEN_LENGTH = 4


def _build_table(groups: Iterable[Iterable[Tuple[str, str]]]) -> Mapping[str, str]:
    table: Dict[str, str] = {}
    for group in groups:
        for key, glyphs in group:
            if key in table:
                raise ValueError(f"Duplicate romaji key: {key}")
            if not 1 <= len(key) <= MAX_TOKEN_LENGTH:
                raise ValueError(f"Romaji key out of range: {key}")
            table[key] = glyphs
    return types.MappingProxyType(table)


_VOWELS = [("AA", "あ"), ("II", "い"), ("UU", "う"), ("EE", "え"), ("OO", "お")]

_SMALL = [
    ("XYA", "ゃ"), ("XYU", "ゅ"), ("XYO", "ょ"), ("XTSU", "っ"),
    ("XA", "ぁ"), ("XI", "ぃ"), ("XU", "ぅ"), ("XE", "ぇ"), ("XO", "ぉ"),
]

_ROWS = [
    ("KA", "か"), ("KI", "き"), ("KU", "く"), ("KE", "け"), ("KO", "こ"),
    ("GA", "が"), ("GI", "ぎ"), ("GU", "ぐ"), ("GE", "げ"), ("GO", "ご"),
    ("SA", "さ"), ("SHI", "し"), ("SU", "す"), ("SE", "せ"), ("SO", "そ"),
    ("ZA", "ざ"), ("JI", "じ"), ("ZI", "じ"), ("ZU", "ず"), ("ZE", "ぜ"), ("ZO", "ぞ"),
    ("TA", "た"), ("CHI", "ち"), ("TSU", "つ"), ("TE", "て"), ("TO", "と"),
    ("DA", "だ"), ("DI", "ぢ"), ("DU", "づ"), ("DE", "で"), ("DO", "ど"),
    ("NA", "な"), ("NI", "に"), ("NU", "ぬ"), ("NE", "ね"), ("NO", "の"),
    ("HA", "は"), ("HI", "ひ"), ("FU", "ふ"), ("HU", "ふ"), ("HE", "へ"), ("HO", "ほ"),
    ("BA", "ば"), ("BI", "び"), ("BU", "ぶ"), ("BE", "べ"), ("BO", "ぼ"),
    ("PA", "ぱ"), ("PI", "ぴ"), ("PU", "ぷ"), ("PE", "ぺ"), ("PO", "ぽ"),
    ("MA", "ま"), ("MI", "み"), ("MU", "む"), ("ME", "め"), ("MO", "も"),
    ("YA", "や"), ("YU", "ゆ"), ("YO", "よ"),
    ("RA", "ら"), ("RI", "り"), ("RU", "る"), ("RE", "れ"), ("RO", "ろ"),
    ("WA", "わ"), ("WI", "ゐ"), ("WE", "ゑ"), ("WO", "を"),
    ("NN", "ん"),
]

# Youon: consonant + small ya/yu/yo
_YOUON = [
    ("KYA", "きゃ"), ("KYU", "きゅ"), ("KYO", "きょ"),
    ("GYA", "ぎゃ"), ("GYU", "ぎゅ"), ("GYO", "ぎょ"),
    ("SHA", "しゃ"), ("SHU", "しゅ"), ("SHO", "しょ"),
    ("JA", "じゃ"), ("JU", "じゅ"), ("JO", "じょ"),
    ("ZYA", "じゃ"), ("ZYU", "じゅ"), ("ZYO", "じょ"),
    ("CHA", "ちゃ"), ("CHU", "ちゅ"), ("CHO", "ちょ"),
    ("NYA", "にゃ"), ("NYU", "にゅ"), ("NYO", "にょ"),
    ("HYA", "ひゃ"), ("HYU", "ひゅ"), ("HYO", "ひょ"),
    ("BYA", "びゃ"), ("BYU", "びゅ"), ("BYO", "びょ"),
    ("PYA", "ぴゃ"), ("PYU", "ぴゅ"), ("PYO", "ぴょ"),
    ("MYA", "みゃ"), ("MYU", "みゅ"), ("MYO", "みょ"),
    ("RYA", "りゃ"), ("RYU", "りゅ"), ("RYO", "りょ"),
]

ROMAJI_TO_HIRAGANA: Mapping[str, str] = _build_table([_VOWELS, _SMALL, _ROWS, _YOUON])


def transliterate(text: str) -> str:
    """
    Convert romaji to hiragana using greedy longest-match tokenization.

    At each position the 4, 3, 2 and 1 character windows are looked up
    (uppercased) in that order. The first hit is emitted; with no hit the
    original character is copied through with its casing intact.

    Examples:
        >>> transliterate("KYOUSHITSU")
        'きょUしつ'
        >>> transliterate("xyz123")
        'xyz123'
    """
    upper = text.upper()
    # str.upper() can change length for some non-ASCII input (e.g. "ß")
    if len(upper) != len(text):
        upper = "".join(ch.upper() if len(ch.upper()) == 1 else ch for ch in text)

    result = []
    i = 0
    while i < len(text):
        for size in range(MAX_TOKEN_LENGTH, 0, -1):
            if i + size > len(text):
                continue
            glyphs = ROMAJI_TO_HIRAGANA.get(upper[i:i + size])
            if glyphs is not None:
                result.append(glyphs)
                i += size
                break
        else:
            result.append(text[i])
            i += 1
    return "".join(result)


def assist_reading_input(text: str) -> str:
    """Convert typed text only when it contains an uppercase letter."""
    if not text or not any(ch.isalpha() and ch.isupper() for ch in text):
        return text
    return transliterate(text)


def _all_in_range(text: str, low: int, high: int) -> bool:
    return bool(text) and all(low <= ord(ch) <= high for ch in text)


def is_hiragana(text: str) -> bool:
    return _all_in_range(text, 0x3040, 0x309F)


def is_katakana(text: str) -> bool:
    return _all_in_range(text, 0x30A0, 0x30FF)


def is_kanji(text: str) -> bool:
    # CJK Unified Ideographs
    return _all_in_range(text, 0x4E00, 0x9FAF)
