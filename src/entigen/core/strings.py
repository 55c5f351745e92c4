"""
String utility functions for entigen.

Naming transformations shared by the semantic model and the backends.
"""

from __future__ import annotations

import re

# Irregular plurals that don't follow standard rules
_IRREGULAR_PLURALS = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "foot": "feet",
    "tooth": "teeth",
    "goose": "geese",
    "mouse": "mice",
    "ox": "oxen",
    "datum": "data",
    "medium": "media",
    "criterion": "criteria",
    "index": "indices",
    "matrix": "matrices",
    "vertex": "vertices",
    "status": "statuses",
    "address": "addresses",
}


def pluralize(word: str) -> str:
    """
    Convert a singular English word to its plural form.

    Handles common English pluralization rules including:
    - Words ending in -y (policy -> policies, but key -> keys)
    - Words ending in -s, -x, -z, -ch, -sh (bus -> buses)
    - Words ending in -f/-fe (leaf -> leaves)
    - Irregular plurals (person -> people)

    Args:
        word: Singular word to pluralize

    Returns:
        Plural form of the word

    Examples:
        >>> pluralize("Stamp")
        'Stamps'
        >>> pluralize("Category")
        'Categories'
        >>> pluralize("StampCategory")
        'StampCategories'
    """
    if not word:
        return word

    lower_word = word.lower()

    if lower_word in _IRREGULAR_PLURALS:
        plural = _IRREGULAR_PLURALS[lower_word]
        if word[0].isupper():
            return plural.capitalize()
        return plural

    # CamelCase: pluralize the last word only (StampCategory -> Stamp + Categories)
    camel_match = re.match(r"^(.+)([A-Z][a-z]+)$", word)
    if camel_match:
        prefix, last_word = camel_match.groups()
        if prefix and last_word != word:
            return prefix + pluralize(last_word)

    if lower_word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    elif lower_word.endswith("y"):
        if len(word) > 1 and lower_word[-2] in "aeiou":
            return word + "s"
        return word[:-1] + "ies"
    elif lower_word.endswith("f"):
        if lower_word.endswith(("elf", "alf", "olf", "eaf", "oaf", "arf")):
            return word[:-1] + "ves"
        return word + "s"
    elif lower_word.endswith("fe"):
        return word[:-2] + "ves"
    elif lower_word.endswith("o"):
        if lower_word.endswith(("hero", "potato", "tomato", "echo", "veto")):
            return word + "es"
        return word + "s"
    else:
        return word + "s"


def cap_lower(name: str) -> str:
    """Lowercase the first character (``UserID`` -> ``userID``)."""
    if not name:
        return name
    return name[0].lower() + name[1:]


def cap_upper(name: str) -> str:
    """Uppercase the first character (``stamps`` -> ``Stamps``)."""
    if not name:
        return name
    return name[0].upper() + name[1:]


def camel_to_snake(name: str) -> str:
    """
    Convert CamelCase to snake_case.

    Examples:
        >>> camel_to_snake("GetStampsOfUser")
        'get_stamps_of_user'
        >>> camel_to_snake("ownerID")
        'owner_id'
    """
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()
