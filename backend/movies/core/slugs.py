"""
Slug derivation for movies.

A slug is the URL-safe, human-readable identity of a movie, derived from its
title and year of release. ``generate_slug`` is the only place slugs are made.
"""

import re

_DISALLOWED_CHARS = re.compile(r"[^0-9A-Za-z _-]")
_SPACE_RUNS = re.compile(r" +")


def generate_slug(title: str, year_of_release: int) -> str:
    """Derive the canonical slug for a movie

    >>> generate_slug("The Matrix", 1999)
    'the-matrix-1999'
    >>> generate_slug("Léon: The Professional", 1994)
    'lon-the-professional-1994'
    """
    slugged_title = _DISALLOWED_CHARS.sub("", title).lower()
    slugged_title = _SPACE_RUNS.sub("-", slugged_title)
    return f"{slugged_title}-{year_of_release}"


__all__ = ["generate_slug"]
