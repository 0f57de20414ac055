"""Identifier case conversions used for generated names and paths."""

from __future__ import annotations

import re
from typing import List, Set

_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z0-9])|[A-Z]?[a-z0-9]+|[A-Z]+|[0-9]+")


def split_words(value: str) -> List[str]:
    """Split an identifier into words on separators and case boundaries.

    Runs of capitals are kept together so acronyms survive a round trip:
    ``HTTPServer`` splits into ``HTTP`` and ``Server``.
    """
    words: List[str] = []
    for chunk in re.split(r"[^0-9A-Za-z]+", value):
        words.extend(_WORD_RE.findall(chunk))
    return words


def upper_first(value: str) -> str:
    """Upper-case only the first character (Go's exported spelling of a name)."""
    return value[:1].upper() + value[1:]


def lower_first(value: str) -> str:
    return value[:1].lower() + value[1:]


def pascal_case(value: str) -> str:
    """``get_order`` and ``getOrder`` both become ``GetOrder``."""
    return "".join(upper_first(word) for word in split_words(value))


def camel_case(value: str) -> str:
    """``GetOrder`` becomes ``getOrder``; a leading acronym is lowered whole."""
    words = split_words(value)
    if not words:
        return ""
    return words[0].lower() + "".join(upper_first(word) for word in words[1:])


def unique_name(base: str, taken: Set[str]) -> str:
    """Return ``base``, or ``base`` with the first free numeric suffix, and mark it taken."""
    name = base
    counter = 1
    while name in taken:
        name = f"{base}{counter}"
        counter += 1
    taken.add(name)
    return name


def snake_case(value: str) -> str:
    return "_".join(word.lower() for word in split_words(value))


def hyphen_case(value: str) -> str:
    return "-".join(word.lower() for word in split_words(value))


__all__ = [
    "camel_case",
    "hyphen_case",
    "lower_first",
    "pascal_case",
    "snake_case",
    "split_words",
    "unique_name",
    "upper_first",
]
