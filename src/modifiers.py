"""Text modifiers applied to selected values (.capitalize, .lowercase, .pluralForm)."""

import re
from enum import Enum


class Modifier(str, Enum):
    """Modifier names recognised at the end of a table path."""
    CAPITALIZE = "capitalize"
    LOWERCASE = "lowercase"
    PLURAL_FORM = "pluralForm"
    MARKOV = "markov"


KNOWN_MODIFIERS = frozenset(m.value for m in Modifier)


def parse_modifier(name: str) -> Modifier | None:
    """Return the Modifier for a path segment, or None if it is not one."""
    try:
        return Modifier(name)
    except ValueError:
        return None


def capitalize(text: str) -> str:
    return text[:1].upper() + text[1:].lower()


def pluralize(text: str) -> str:
    """
    Heuristic English plural.

    Examples:
        box -> boxes, city -> cities, day -> days, wolf -> wolves,
        knife -> knives, sword -> swords
    """
    if not text:
        return text
    if text.endswith(("s", "sh", "ch", "x", "z")):
        return text + "es"
    if text.endswith("y") and not re.search(r"[aeiou]y$", text):
        return text[:-1] + "ies"
    if text.endswith("f"):
        return text[:-1] + "ves"
    if text.endswith("fe"):
        return text[:-2] + "ves"
    return text + "s"


def apply_modifier(text: str, modifier: Modifier) -> str:
    """
    Apply a single modifier to text.

    MARKOV is a no-op here: it changes how a value is produced, not how it
    is transformed, and is handled by the evaluator.
    """
    if modifier is Modifier.CAPITALIZE:
        return capitalize(text)
    if modifier is Modifier.LOWERCASE:
        return text.lower()
    if modifier is Modifier.PLURAL_FORM:
        return pluralize(text)
    if modifier is Modifier.MARKOV:
        return text
    raise TypeError(f"Unknown modifier: {modifier!r}")


def apply_modifiers(text: str, modifiers: tuple[Modifier, ...]) -> str:
    """Apply modifiers left to right, in the order they were written."""
    for modifier in modifiers:
        text = apply_modifier(text, modifier)
    return text
