# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Best-effort transliteration of Unicode text into ASCII.

Used as a fallback when looking up input files whose names were
ASCII-fied on disk while the job description kept the original spelling.
"""

import re
import unicodedata

# "<BASE> WITH <MODIFIER>", e.g. "LATIN SMALL LETTER A WITH DIAERESIS"
_WITH_PATTERN = re.compile(r"^(.+)\sWITH\s(.*)")
# base names of letters rendered with a trailing 'e' instead of a diaeresis
_UMLAUT_BASE_PATTERN = re.compile(r"\b[aou]\b", re.IGNORECASE)


def asciify(codepoint: int) -> str:
    """
    Convert a single Unicode code point into an ASCII approximation.

    Code points below 128 are returned unchanged. Letters with a
    diacritic are reduced to their base letter, except for a, o and u
    with a diaeresis which follow the German convention (ä -> ae).
    Sharp s becomes 'ss'. Anything else is returned as '?'.

    Args:
        codepoint (int): The code point to convert.

    Returns:
        str: The ASCII approximation. Never raises.
    """
    if 0 <= codepoint < 128:
        return chr(codepoint)

    try:
        name = unicodedata.name(chr(codepoint))
    except (ValueError, OverflowError):
        return "?"

    if match := _WITH_PATTERN.match(name):
        base, modifier = match.groups()
        try:
            base_char = unicodedata.lookup(base)
        except KeyError:
            return "?"

        if modifier == "DIAERESIS" and _UMLAUT_BASE_PATTERN.search(base):
            return base_char + "e"
        return base_char

    if name == "LATIN SMALL LETTER SHARP S":
        return "ss"

    return "?"


def asciify_name(text: str) -> str:
    """
    Transliterate every character of `text` using `asciify`.
    """
    return "".join(asciify(ord(c)) for c in text)
