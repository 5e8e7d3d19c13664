"""Tests for romaji → hiragana input assistance."""
import pytest

from llm_kanji_srs import kana
from llm_kanji_srs.kana import ROMAJI_TO_HIRAGANA, transliterate


def test_empty_string() -> None:
    assert transliterate("") == ""


def test_no_matches_passes_through_with_case() -> None:
    assert transliterate("xyz123") == "xyz123"


def test_single_vowels_are_not_converted() -> None:
    # "KYOU": no 4-letter key, KYO → きょ, then a bare U stays as-is
    assert transliterate("KYOUSHITSU") == "きょUしつ"
    assert transliterate("A") == "A"
    assert transliterate("KYOUU") == "きょう"


def test_doubled_vowels() -> None:
    assert transliterate("AAIIUUEEOO") == "あいうえお"


def test_lowercase_input_matches_case_insensitively() -> None:
    assert transliterate("ka") == "か"
    assert transliterate("Shi") == "し"


def test_small_tsu_uses_four_letter_match() -> None:
    assert transliterate("GAXTSUKOU") == "がっこU"
    assert transliterate("XTSU") == "っ"


def test_longest_match_prefers_youon() -> None:
    assert transliterate("KYA") == "きゃ"
    assert transliterate("SHA") == "しゃ"
    assert transliterate("CHOO") == "ちょO"
    assert transliterate("RYOKOU") == "りょこU"


def test_nasal_and_aliases() -> None:
    assert transliterate("KANNJI") == "かんじ"
    assert transliterate("ZI") == transliterate("JI") == "じ"
    assert transliterate("HU") == transliterate("FU") == "ふ"
    assert transliterate("ZYA") == transliterate("JA") == "じゃ"
    assert transliterate("WIWE") == "ゐゑ"


def test_irregular_d_row() -> None:
    assert transliterate("DIDU") == "ぢづ"


def test_mixed_text_keeps_unmatched_characters() -> None:
    assert transliterate("IICHI-NI!") == "いち-に!"
    assert transliterate("日本 NIHONN") == "日本 にほん"


@pytest.mark.parametrize("key", sorted(ROMAJI_TO_HIRAGANA))
def test_every_key_converts_to_its_glyphs(key: str) -> None:
    assert transliterate(key) == ROMAJI_TO_HIRAGANA[key]
    assert transliterate(key.lower()) == ROMAJI_TO_HIRAGANA[key]


def test_concatenated_keys_convert_piecewise() -> None:
    keys = ["TO", "UU", "KYO", "XTSU", "TE", "NN", "CHI"]
    assert transliterate("".join(keys)) == "".join(ROMAJI_TO_HIRAGANA[k] for k in keys)


def test_table_shape() -> None:
    assert all(1 <= len(k) <= 4 and k == k.upper() for k in ROMAJI_TO_HIRAGANA)
    assert all(1 <= len(v) <= 2 for v in ROMAJI_TO_HIRAGANA.values())
    for vowel in "AIUEO":
        assert vowel not in ROMAJI_TO_HIRAGANA


def test_table_is_immutable() -> None:
    with pytest.raises(TypeError):
        ROMAJI_TO_HIRAGANA["KA"] = "カ"  # type: ignore[index]


def test_duplicate_keys_rejected() -> None:
    with pytest.raises(ValueError):
        kana._build_table([[("KA", "か")], [("KA", "カ")]])


def test_assist_only_converts_uppercase_input() -> None:
    assert kana.assist_reading_input("ichi") == "ichi"
    assert kana.assist_reading_input("IICHI") == "いち"
    assert kana.assist_reading_input("いち") == "いち"
    assert kana.assist_reading_input("") == ""


def test_script_helpers() -> None:
    assert kana.is_hiragana("ひらがな")
    assert not kana.is_hiragana("ひらガナ")
    assert kana.is_katakana("カタカナ")
    assert kana.is_kanji("漢字")
    assert not kana.is_kanji("漢じ")
    assert not kana.is_hiragana("")
    assert not kana.is_katakana("")
    assert not kana.is_kanji("")
