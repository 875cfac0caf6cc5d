"""Turn PARAM.SFO titles into tidy Windows file names.

``sanitize_filename("GOD OF WAR® III")`` -> ``"God Of War III"``.

Casing uses Python's Unicode default case mapping, which does not depend on
the host locale, so the same title always produces the same name.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable, Mapping

from ps3batch import config

ROMAN_NUMERAL_RE = re.compile(
    r"^M{0,4}(CM|CD|D?C{0,3})(XC|XL|L?X{0,3})(IX|IV|V?I{0,3})$", re.IGNORECASE
)


def is_roman_numeral(token: str) -> bool:
    """True for a non-empty roman numeral (the pattern alone accepts "")."""
    return bool(token) and ROMAN_NUMERAL_RE.match(token) is not None


def _is_letter(ch: str) -> bool:
    return unicodedata.category(ch).startswith("L")


def _is_cased(ch: str) -> bool:
    return ch.lower() != ch.upper()


def _is_number(ch: str) -> bool:
    return unicodedata.category(ch).startswith("N")


def replace_glyphs(name: str, glyphs: Iterable[tuple[str, str]] = config.GLYPH_REPLACEMENTS) -> str:
    """Apply the glyph table. Matching ignores case, so "σ" goes the way of "Σ"."""
    for glyph, replacement in glyphs:
        name = re.sub(re.escape(glyph), lambda _m, r=replacement: r, name, flags=re.IGNORECASE)
    return name


def space_letters_and_digits(name: str) -> str:
    """Insert a space at every letter/number boundary: "ironman2" -> "ironman 2"."""
    out: list[str] = []
    prev = ""
    for ch in name:
        if prev and (
            (_is_letter(prev) and _is_number(ch)) or (_is_number(prev) and _is_letter(ch))
        ):
            out.append(" ")
        out.append(ch)
        prev = ch
    return "".join(out)


def split_tokens(name: str, separators: Iterable[str] = config.TOKEN_SEPARATORS) -> list[str]:
    seps = set(separators)
    tokens: list[str] = []
    current: list[str] = []
    for ch in name:
        if ch in seps:
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(ch)
    if current:
        tokens.append("".join(current))
    return tokens


def title_case(token: str) -> str:
    """Lower-case ``token`` and capitalize the first letter of each word in it.

    Apostrophes and combining marks do not start a new word
    ("o'neil" -> "O'neil"). Only a cased letter opens a word; uncased
    letters (kana, "ʼ") pass through, so "ŉ" -> "ʼN" stays "ʼN".
    """
    out: list[str] = []
    in_word = False
    for ch in token.lower():
        if _is_letter(ch):
            if in_word or not _is_cased(ch):
                out.append(ch)
            else:
                out.append(ch.title())
                in_word = True
        else:
            out.append(ch)
            in_word = in_word and (ch in "'’" or unicodedata.category(ch).startswith("M"))
    return "".join(out)


def normalize_token(token: str, keep_tokens: Mapping[str, str] = config.KEEP_AS_IS) -> str:
    kept = keep_tokens.get(token.casefold())
    if kept is not None:
        return kept
    if is_roman_numeral(token):
        return token.upper()
    return title_case(token)


def strip_invalid_chars(name: str, invalid: Iterable[str] = config.INVALID_FILENAME_CHARS) -> str:
    bad = set(invalid)
    return "".join(ch for ch in name if ch not in bad)


def sanitize_filename(
    raw: str,
    glyphs: Iterable[tuple[str, str]] = config.GLYPH_REPLACEMENTS,
    keep_tokens: Mapping[str, str] = config.KEEP_AS_IS,
) -> str:
    """Build a display/file name from a raw title, id or folder name.

    Never fails; returns "" when nothing usable is left.
    """
    name = replace_glyphs(raw or "", glyphs)
    # Before spacing, so "a/1" yields "A 1" rather than "A1"
    name = strip_invalid_chars(name)
    name = space_letters_and_digits(name)
    tokens = [normalize_token(t, keep_tokens) for t in split_tokens(name)]
    return strip_invalid_chars(" ".join(tokens))
