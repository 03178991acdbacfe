# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
English inflection and the table/column naming conventions built on it.

All functions here are pure and deterministic.
"""

from __future__ import annotations

import re
from typing import Dict

from .constants import ConventionConstants

# Irregular plurals that don't follow standard rules
_IRREGULAR_PLURALS: Dict[str, str] = {
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
    "bus": "buses",
    "campus": "campuses",
    "virus": "viruses",
}
_IRREGULAR_SINGULARS: Dict[str, str] = {plural: singular for singular, plural in _IRREGULAR_PLURALS.items()}

# Words that are the same in both forms
_UNCOUNTABLE = frozenset({"equipment", "information", "series", "species", "news", "sheep", "fish", "deer"})

_F_TO_VES = ("elf", "alf", "olf", "eaf", "oaf", "arf")
_O_TO_OES = ("hero", "potato", "tomato", "echo", "veto")

_CAMEL_TAIL = re.compile(r"^(.+?)([A-Z][a-z]+)$")


def _match_case(source: str, replacement: str) -> str:
    if source[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def _split_camel(word: str):
    match = _CAMEL_TAIL.match(word)
    if match:
        prefix, last_word = match.groups()
        if prefix and last_word != word:
            return prefix, last_word
    return None


def pluralize(word: str) -> str:
    """
    Convert a singular English word to its plural form.

    Args:
        word: Singular word to pluralize

    Returns:
        Plural form of the word

    Examples:
        >>> pluralize("Doctor")
        'Doctors'
        >>> pluralize("Child")
        'Children'
        >>> pluralize("StudentCourse")
        'StudentCourses'
    """
    if not word:
        return word

    lower_word = word.lower()
    if lower_word in _UNCOUNTABLE:
        return word
    if lower_word in _IRREGULAR_PLURALS:
        return _match_case(word, _IRREGULAR_PLURALS[lower_word])

    # CamelCase: only the last word is inflected
    parts = _split_camel(word)
    if parts:
        return parts[0] + pluralize(parts[1])

    if lower_word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    if lower_word.endswith("y"):
        if len(word) > 1 and lower_word[-2] in "aeiou":
            return word + "s"
        return word[:-1] + "ies"
    if lower_word.endswith("f"):
        if lower_word.endswith(_F_TO_VES):
            return word[:-1] + "ves"
        return word + "s"
    if lower_word.endswith("fe"):
        return word[:-2] + "ves"
    if lower_word.endswith("o") and lower_word.endswith(_O_TO_OES):
        return word + "es"
    return word + "s"


def singularize(word: str) -> str:
    """
    Convert a plural English word to its singular form.

    Words that already look singular are returned unchanged, so the function
    is safe to apply to names whose number is unknown.

    Examples:
        >>> singularize("Doctors")
        'Doctor'
        >>> singularize("Children")
        'Child'
        >>> singularize("Classes")
        'Class'
    """
    if not word:
        return word

    lower_word = word.lower()
    if lower_word in _UNCOUNTABLE:
        return word
    if lower_word in _IRREGULAR_SINGULARS:
        return _match_case(word, _IRREGULAR_SINGULARS[lower_word])
    if lower_word in _IRREGULAR_PLURALS:
        return word

    parts = _split_camel(word)
    if parts:
        return parts[0] + singularize(parts[1])

    if lower_word.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if lower_word.endswith("ves"):
        stem = lower_word[:-3]
        if (stem + "f").endswith(_F_TO_VES):
            return word[:-3] + "f"
        return word[:-3] + "fe"
    if lower_word.endswith(("sses", "shes", "ches", "xes", "zes")):
        return word[:-2]
    if lower_word.endswith("oes") and lower_word[:-2].endswith(_O_TO_OES):
        return word[:-2]
    if lower_word.endswith(("ss", "us", "is")):
        return word
    if lower_word.endswith("s") and len(word) > 1:
        return word[:-1]
    return word


def lower_first(word: str) -> str:
    return word[:1].lower() + word[1:]


def upper_first(word: str) -> str:
    return word[:1].upper() + word[1:]


def guess_column_name(table: str, column: str, underscored: bool = False) -> str:
    """
    Name the column that refers to ``column`` of ``table`` from another table.

    The table name may be schema-qualified ("db.Parents"); only the last part is
    used. ``guess_column_name("Parents", "id")`` is ``"parentId"``; with
    ``underscored`` it is ``"parent_id"``.
    """
    table = singularize(table.split(ConventionConstants.PATH_SEPARATOR)[-1])
    if underscored:
        return f"{lower_first(table)}{ConventionConstants.UNDERSCORE}{column}"
    return lower_first(table) + upper_first(column)


def guess_table_name(local_table: str, remote_table: str) -> str:
    """
    Name the join table linking two tables.

    Both names are singularized and joined in alphabetical order with the
    trailing name pluralized, so either side of a many-to-many relationship
    derives the same table: ``("Patients", "Doctors")`` gives ``"DoctorPatients"``.
    """
    names = sorted(
        upper_first(singularize(name.split(ConventionConstants.PATH_SEPARATOR)[-1]))
        for name in (local_table, remote_table)
    )
    return names[0] + pluralize(names[1])


def guess_model_name(attribute: str) -> str:
    """Model name implied by a relationship attribute: ``doctors`` -> ``Doctor``."""
    return singularize(upper_first(attribute))


def guess_table_name_for_model(model_name: str) -> str:
    return pluralize(model_name)
