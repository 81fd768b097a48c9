"""English singular/plural forms for table naming.

Covers regular suffix rules plus a short irregular list; names that already
look plural stay put when pluralized and vice versa.
"""

import re

_IRREGULAR = {
    "person": "people",
    "man": "men",
    "woman": "women",
    "child": "children",
    "mouse": "mice",
    "goose": "geese",
    "foot": "feet",
    "tooth": "teeth",
}
_IRREGULAR_PLURALS = {plural: singular for singular, plural in _IRREGULAR.items()}
_UNCOUNTABLE = frozenset({"data", "equipment", "information", "metadata", "news", "series", "species"})

_PLURAL_RULES: list[tuple[str, str]] = [
    (r"(quiz)$", r"\1zes"),
    (r"(matr|vert|ind)(?:ix|ex)$", r"\1ices"),
    (r"(x|ch|ss|sh|zz)$", r"\1es"),
    (r"([^aeiouy]|qu)y$", r"\1ies"),
    (r"(?:([^f])fe|([lr])f)$", r"\1\2ves"),
    (r"(bu|statu|alia)s$", r"\1ses"),
    (r"(octop|vir)us$", r"\1i"),
    (r"(ax|test)is$", r"\1es"),
    (r"s$", "s"),
    (r"$", "s"),
]

_SINGULAR_RULES: list[tuple[str, str]] = [
    (r"(quiz)zes$", r"\1"),
    (r"(matr)ices$", r"\1ix"),
    (r"(vert|ind)ices$", r"\1ex"),
    (r"(x|ch|ss|sh|zz)es$", r"\1"),
    (r"([^aeiouy]|qu)ies$", r"\1y"),
    (r"([lr])ves$", r"\1f"),
    (r"([^f])ves$", r"\1fe"),
    (r"(bu|statu|alia)ses$", r"\1s"),
    (r"(bu|statu|alia)s$", r"\1s"),
    (r"(octop|vir)i$", r"\1us"),
    (r"(ax|test)es$", r"\1is"),
    (r"ss$", "ss"),
    (r"s$", ""),
]


def _split(word: str) -> tuple[str, str]:
    """Split off the last underscore-separated segment, which is the one inflected."""
    head, sep, tail = word.rpartition("_")
    return head + sep, tail


def _apply(word: str, rules: list[tuple[str, str]]) -> str:
    for pattern, replacement in rules:
        if re.search(pattern, word, flags=re.IGNORECASE):
            return re.sub(pattern, replacement, word, count=1, flags=re.IGNORECASE)
    return word


def pluralize(word: str) -> str:
    prefix, last = _split(word)
    lower = last.lower()
    if not last or lower in _UNCOUNTABLE or lower in _IRREGULAR_PLURALS:
        return word
    if lower in _IRREGULAR:
        return prefix + _IRREGULAR[lower]
    return prefix + _apply(last, _PLURAL_RULES)


def singularize(word: str) -> str:
    prefix, last = _split(word)
    lower = last.lower()
    if not last or lower in _UNCOUNTABLE or lower in _IRREGULAR:
        return word
    if lower in _IRREGULAR_PLURALS:
        return prefix + _IRREGULAR_PLURALS[lower]
    return prefix + _apply(last, _SINGULAR_RULES)
