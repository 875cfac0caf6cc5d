import random

import pytest

from ps3batch.common.sanitize import (
    is_roman_numeral,
    sanitize_filename,
    space_letters_and_digits,
    split_tokens,
    title_case,
)
from ps3batch.config import INVALID_FILENAME_CHARS


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("FFX", "FFX"),
        ("ironman2", "Ironman 2"),
        ("GOD OF WAR® III", "God Of War III"),
        ("FINAL FANTASY XIII", "Final Fantasy XIII"),
        ("Uncharted 2: Among Thieves™", "Uncharted 2 Among Thieves"),
        ("LittleBigPlanet™ 2", "Littlebigplanet 2"),
        ("NINJA GAIDEN Σ 2", "Ninja Gaiden Sigma 2"),
        ("killzone3", "Killzone 3"),
        ("Demon's Souls", "Demon's Souls"),
        ("tom_clancy's.hawx", "Tom Clancy's Hawx"),
        ("DC Universe Online", "DC Universe Online"),
        ("BLUS30443", "Blus 30443"),
        ("ファイナルファンタジー13", "ファイナルファンタジー 13"),
        ("  spaced   out  ", "Spaced Out"),
    ],
)
def test_sanitize_examples(raw, expected):
    assert sanitize_filename(raw) == expected


def test_empty_and_symbol_only():
    assert sanitize_filename("") == ""
    assert sanitize_filename("™®") == ""
    assert sanitize_filename(" - _ . ") == ""
    assert sanitize_filename(None) == ""  # type: ignore[arg-type]


def test_invalid_chars_removed():
    out = sanitize_filename('What? <Really> "Quoted" a|b *star* back\\slash fwd/slash')
    assert not set(out) & INVALID_FILENAME_CHARS
    assert out == "What Really Quoted Ab Star Backslash Fwdslash"


def test_invalid_char_between_letter_and_digit():
    assert sanitize_filename("a/1") == "A 1"
    assert sanitize_filename(sanitize_filename("a/1")) == "A 1"


def test_control_characters_removed():
    assert sanitize_filename("Game\x00\x07Title\x1f") == "Gametitle"


def test_colon_becomes_separator():
    assert sanitize_filename("Batman: Arkham City") == "Batman Arkham City"


def test_glyphs_match_any_case():
    assert sanitize_filename("ninja gaiden σ") == "Ninja Gaiden Sigma"


def test_word_initial_sharp_s():
    assert sanitize_filename("ß straße") == "Ss Straße"


def test_custom_glyph_table():
    assert sanitize_filename("Ōkami", glyphs=(("Ō", "O"),)) == "Okami"
    # Without the default table the trademark sign survives
    assert sanitize_filename("Game™", glyphs=()) == "Game™"


def test_custom_keep_tokens():
    assert sanitize_filename("FFX", keep_tokens={}) == "Ffx"
    assert sanitize_filename("psn exclusive", keep_tokens={"psn": "PSN"}) == "PSN Exclusive"


@pytest.mark.parametrize("token", ["I", "iv", "XIII", "MMXXIV", "mcmlxxxiv", "DC", "mix"])
def test_roman_numerals(token):
    assert is_roman_numeral(token)


@pytest.mark.parametrize("token", ["", "IIII", "VX", "IC", "FFX", "Game", "2"])
def test_not_roman_numerals(token):
    assert not is_roman_numeral(token)


def test_space_letters_and_digits():
    assert space_letters_and_digits("a1b2") == "a 1 b 2"
    assert space_letters_and_digits("1a1") == "1 a 1"
    assert space_letters_and_digits("R2-D2") == "R 2-D 2"
    assert space_letters_and_digits("") == ""


def test_split_tokens():
    assert split_tokens("a..b -c_d:e") == ["a", "b", "c", "d", "e"]
    assert split_tokens("---") == []


def test_title_case():
    assert title_case("HELLO") == "Hello"
    assert title_case("o'neil") == "O'neil"
    assert title_case("(hello)world") == "(Hello)World"
    assert title_case("école") == "École"
    assert title_case("123") == "123"


def test_title_case_skips_uncased_letters():
    assert title_case("ŉ") == "ʼN"
    assert title_case("ʼn") == "ʼN"
    assert title_case("ニーアa") == "ニーアA"


def test_letter_with_uncased_upper_prefix_is_stable():
    once = sanitize_filename("ŉ")
    assert once == "ʼN"
    assert sanitize_filename(once) == once


IDEMPOTENCY_INPUTS = [
    "FFX",
    "ironman2",
    "GOD OF WAR® III",
    "Metal Gear Solid 4: Guns of the Patriots",
    "a*b",
    "a/1",
    "İstanbul Rush",
    "café racer",
    "ß straße",
    "Ⅻ Monkeys",
    "x1y2z3",
    "ŉ",
    "Rock ŉ Roll",
    "ǅemal",
    "ΐ ǰ",
    "",
]


@pytest.mark.parametrize("raw", IDEMPOTENCY_INPUTS)
def test_idempotent(raw):
    once = sanitize_filename(raw)
    assert sanitize_filename(once) == once


def _random_text(rng: random.Random) -> str:
    pools = [
        "abcXYZ019 .-_:™®Σ",
        '"<>|*?\\/',
        "".join(chr(i) for i in range(32)),
        "éÉßİıﬁ’'ⅫⅣ٣३ニーアσςŉǅΐǰʼ",
    ]
    return "".join(rng.choice(rng.choice(pools)) for _ in range(rng.randint(0, 40)))


@pytest.mark.parametrize("seed", range(10))
def test_random_input_properties(seed):
    rng = random.Random(seed)
    for _ in range(100):
        raw = _random_text(rng)
        out = sanitize_filename(raw)
        assert not set(out) & INVALID_FILENAME_CHARS
        assert sanitize_filename(out) == out
        assert out == out.strip()
        assert "  " not in out
