"""Regnum Forum Archive — language and category derivation from thread paths.

Thread rows only store a slash-delimited path such as
``Calendar/Champions of Regnum/English/General Discussion``. Language and
category are derived from it, both here (for formatting) and in SQL (for
grouping), from the same ordered table.
"""

from __future__ import annotations

from typing import Optional

PATH_PREFIX = "Calendar/Champions of Regnum/"
OTHER = "Other"
GENERAL = "General"
DEFAULT_FLAG = "🌐"

# Checked in this order; the first token found in a path wins.
LANGUAGES = (
    ("/Español/", "Español", "🇪🇸"),
    ("/English/", "English", "🇺🇸"),
    ("/Português/", "Português", "🇵🇹"),
    ("/Deutsch/", "Deutsch", "🇩🇪"),
    ("/Français/", "Français", "🇫🇷"),
    ("/Italiano/", "Italiano", "🇮🇹"),
)

LANGUAGE_NAMES = tuple(name for _, name, _ in LANGUAGES)
_FLAGS = {name: flag for _, name, flag in LANGUAGES}


def resolve_language(path: Optional[str]) -> str:
    """Return the language a thread path belongs to, or ``Other``."""
    if not path:
        return OTHER
    for token, name, _ in LANGUAGES:
        if token in path:
            return name
    return OTHER


def resolve_category(path: Optional[str]) -> str:
    """Return the category part of a thread path.

    Paths with fewer than four segments are ``General``. Otherwise the
    constant prefix and the language segment are stripped and whatever is
    left (possibly nested, e.g. ``Guides/Warrior``) is the category.
    """
    if not path or len(path.split("/")) < 4:
        return GENERAL
    rest = path[len(PATH_PREFIX):] if path.startswith(PATH_PREFIX) else path
    language = resolve_language(path)
    if language != OTHER:
        marker = f"/{language}/"
        anchored = "/" + rest
        idx = anchored.find(marker)
        if idx >= 0:
            rest = anchored[idx + len(marker):]
    return rest or GENERAL


def language_flag(language: Optional[str]) -> str:
    return _FLAGS.get(language, DEFAULT_FLAG)


def language_case(column: str):
    """SQL ``CASE`` expression resolving ``column`` to a language label.

    Returns ``(sql, params)``. ``instr`` keeps the match case-sensitive,
    like :func:`resolve_language`.
    """
    whens = []
    params: list = []
    for token, name, _ in LANGUAGES:
        whens.append(f"WHEN instr({column}, ?) > 0 THEN ?")
        params.extend((token, name))
    sql = "CASE " + " ".join(whens) + " ELSE ? END"
    params.append(OTHER)
    return sql, params
