"""Display names and English pluralization for imported model names."""

from __future__ import annotations

import re

_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z0-9])|[A-Z]?[a-z0-9]+|[A-Z]+")

_IRREGULAR_PLURALS = {
    "person": "people",
    "man": "men",
    "woman": "women",
    "child": "children",
    "tooth": "teeth",
    "foot": "feet",
    "mouse": "mice",
    "goose": "geese",
    "datum": "data",
    "criterion": "criteria",
    "analysis": "analyses",
}
_UNCOUNTABLE = {"data", "information", "equipment", "news", "series", "species", "metadata", "feedback"}


def split_words(name: str) -> list[str]:
    """`orderItem`, `order_item`, `OrderITEMId` -> word list."""
    words: list[str] = []
    for chunk in re.split(r"[_\-\s]+", name or ""):
        words.extend(_WORD_RE.findall(chunk))
    return words


def display_name(name: str) -> str:
    return " ".join(w if w.isupper() and len(w) > 1 else w.capitalize() for w in split_words(name))


def pluralize(word: str) -> str:
    if not word:
        return word
    lower = word.lower()
    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR_PLURALS:
        plural = _IRREGULAR_PLURALS[lower]
        return plural.capitalize() if word[0].isupper() else plural
    if re.search(r"[^aeiou]y$", lower):
        return word[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", lower):
        return word + "es"
    if lower.endswith("fe"):
        return word[:-2] + "ves"
    if re.search(r"(l|ea)f$", lower):
        return word[:-1] + "ves"
    return word + "s"


def plural_display_name(name: str) -> str:
    """Pluralize the last word of the display name: `Order Item` -> `Order Items`."""
    words = display_name(name).split(" ")
    words[-1] = pluralize(words[-1])
    return " ".join(words)
