"""Rule-based English inflection for resource names.

Only the last word of a compound name is inflected, so ``BlogPost`` becomes
``BlogPosts`` and ``blog_post`` becomes ``blog_posts``.  Rules are tried in
order and the first match wins.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Rule tables
# ---------------------------------------------------------------------------

# Only these stems swap f/fe for "ves"; drive, glove and valve keep their "ve".
_F_STEMS = r"(^el|^sel|cal|dwar|hal|hoo|lea|loa|scar|shea|shel|thie|whar|wol)"
_FE_STEMS = r"(kni|wi|^li)"

# Singular words ending in "us" whose plural adds "es".
_US_WORDS = (
    "abacus|apparatus|bonus|cactus|campus|census|chorus|circus|consensus|"
    "corpus|focus|fungus|genus|nexus|prospectus|sinus|surplus|thesaurus|"
    "virus|walrus"
)

_PLURAL_RULES: list[tuple[str, str]] = [
    (r"(quiz)$", r"\1zes"),
    (r"^(oxen)$", r"\1"),
    (r"^(ox)$", r"\1en"),
    (r"^(m|l)ice$", r"\1ice"),
    (r"^(m|l)ouse$", r"\1ice"),
    (r"(matr|vert|ind)(?:ix|ex)$", r"\1ices"),
    (r"(x|ch|ss|sh)$", r"\1es"),
    (r"([^aeiouy]|qu)y$", r"\1ies"),
    (r"(hive)$", r"\1s"),
    (_F_STEMS + r"f$", r"\1ves"),
    (_FE_STEMS + r"fe$", r"\1ves"),
    (r"sis$", "ses"),
    (r"([ti])a$", r"\1a"),
    (r"([ti])um$", r"\1a"),
    (r"(buffal|tomat)o$", r"\1oes"),
    (r"(bu)s$", r"\1ses"),
    (r"(alias|status)$", r"\1es"),
    (r"(octop|vir)i$", r"\1i"),
    (r"(octop|vir)us$", r"\1i"),
    (r"^(ax|test)is$", r"\1es"),
    (r"(us)$", r"\1es"),
    (r"s$", "s"),
    (r"$", "s"),
]

_SINGULAR_RULES: list[tuple[str, str]] = [
    (r"(database)s$", r"\1"),
    (r"(quiz)zes$", r"\1"),
    (r"(matr)ices$", r"\1ix"),
    (r"(vert|ind)ices$", r"\1ex"),
    (r"^(ox)en", r"\1"),
    (r"(alias|status)(es)?$", r"\1"),
    (r"(octop|vir)(us|i)$", r"\1us"),
    (r"^(a)x[ie]s$", r"\1xis"),
    (r"(cris|test)(is|es)$", r"\1is"),
    (r"(shoe)s$", r"\1"),
    (r"(o)es$", r"\1"),
    (r"(bus)(es)?$", r"\1"),
    (r"(" + _US_WORDS + r")es$", r"\1"),
    (r"^(m|l)ice$", r"\1ouse"),
    (r"(x|ch|ss|sh)es$", r"\1"),
    (r"(m)ovies$", r"\1ovie"),
    (r"(s)eries$", r"\1eries"),
    (r"([^aeiouy]|qu)ies$", r"\1y"),
    (_F_STEMS + r"ves$", r"\1f"),
    (_FE_STEMS + r"ves$", r"\1fe"),
    (r"(analy|ba|diagno|parenthe|progno|synop|the)(sis|ses)$", r"\1sis"),
    (r"([ti])a$", r"\1um"),
    (r"(n)ews$", r"\1ews"),
    # Plurals of words that end in "u".
    (r"(menu|guru|haiku|tofu|bayou|caribou|^emu|^gnu)s$", r"\1"),
    (r"(sis|iris|tennis|trellis|polis|pelvis|us|ss)$", r"\1"),
    (r"s$", ""),
]

_IRREGULAR: dict[str, str] = {
    "person": "people",
    "man": "men",
    "woman": "women",
    "child": "children",
    "sex": "sexes",
    "move": "moves",
    "goose": "geese",
    "tooth": "teeth",
    "foot": "feet",
}

_UNCOUNTABLE: frozenset[str] = frozenset({
    "equipment",
    "information",
    "rice",
    "money",
    "species",
    "series",
    "fish",
    "sheep",
    "jeans",
    "police",
    "news",
    "metadata",
})

_LAST_WORD_RE = re.compile(r"([A-Z]?[^A-Z_\s-]+)$")


class Inflector:
    """Singular/plural and underscore/camel conversions for resource names.

    Stateless; one instance can be shared freely.
    """

    def __init__(self) -> None:
        self._plurals = [(re.compile(p, re.IGNORECASE), r) for p, r in _PLURAL_RULES]
        self._singulars = [(re.compile(p, re.IGNORECASE), r) for p, r in _SINGULAR_RULES]
        self._irregular_plural = dict(_IRREGULAR)
        self._irregular_singular = {v: k for k, v in _IRREGULAR.items()}

    # -- Number ------------------------------------------------------------

    def pluralize(self, name: str) -> str:
        """``Category`` -> ``Categories``; ``BlogPost`` -> ``BlogPosts``."""
        return self._inflect_last_word(name, self._irregular_plural, self._plurals)

    def singularize(self, name: str) -> str:
        """``Categories`` -> ``Category``; ``blog_posts`` -> ``blog_post``."""
        return self._inflect_last_word(name, self._irregular_singular, self._singulars)

    def is_singular(self, name: str) -> bool:
        """True when *name* is already in singular form.

        Uncountable words (``news``, ``sheep``) count as singular.
        """
        _, word = _split_last_word(name)
        if not word:
            return True
        lower = word.lower()
        if lower in _UNCOUNTABLE or lower in self._irregular_plural:
            return True
        if lower in self._irregular_singular:
            return False
        return self.singularize(name) == name

    # -- Case --------------------------------------------------------------

    @staticmethod
    def from_underscores(name: str) -> str:
        """``blog_post`` -> ``BlogPost``."""
        return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)

    @staticmethod
    def to_underscores(name: str) -> str:
        """``BlogPost`` -> ``blog_post``."""
        s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
        s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
        return re.sub(r"[-\s]+", "_", s2).lower()

    # -- Internals ---------------------------------------------------------

    def _inflect_last_word(
        self,
        name: str,
        irregular: dict[str, str],
        rules: list[tuple[re.Pattern[str], str]],
    ) -> str:
        head, word = _split_last_word(name)
        if not word:
            return name
        lower = word.lower()
        if lower in _UNCOUNTABLE:
            return name
        if lower in irregular:
            return head + _match_case(word, irregular[lower])
        for pattern, replacement in rules:
            if pattern.search(word):
                result = pattern.sub(replacement, word, count=1)
                if word.isupper():
                    result = result.upper()
                return head + result
        return name


def _split_last_word(name: str) -> tuple[str, str]:
    """Split a compound name into ``(head, last_word)``."""
    if name.isupper():
        return "", name
    match = _LAST_WORD_RE.search(name)
    if match is None:
        return name, ""
    return name[: match.start()], match.group(1)


def _match_case(template: str, word: str) -> str:
    if template.isupper():
        return word.upper()
    if template[:1].isupper():
        return word[:1].upper() + word[1:]
    return word
