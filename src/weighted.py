"""Weighted list items and weighted random selection."""

import random
import re
from dataclasses import dataclass


WEIGHT_PATTERN = re.compile(r'^(.+?)\s*\^([\d.]+)$', re.DOTALL)


@dataclass(frozen=True)
class WeightedItem:
    """A list entry with its selection weight."""
    value: str
    weight: float = 1.0


def parse_weighted_item(item: str) -> WeightedItem:
    """
    Split a raw list entry into its value and weight.

    Args:
        item: Raw entry such as "sword ^2" or "shield"

    Returns:
        WeightedItem with the weight suffix removed (default weight 1.0)
    """
    match = WEIGHT_PATTERN.match(item)
    if match:
        try:
            return WeightedItem(value=match.group(1).strip(), weight=float(match.group(2)))
        except ValueError:
            # "1.2.3" looks like a weight but isn't one
            pass
    return WeightedItem(value=item)


def parse_weighted_list(items: list) -> list[WeightedItem]:
    """
    Parse every entry of a raw list.

    None entries are dropped and non-string scalars (YAML numbers, booleans)
    are converted with str().

    Args:
        items: Raw list entries

    Returns:
        Parsed weighted items in list order
    """
    return [parse_weighted_item(str(item)) for item in items if item is not None]


def strip_weight(item: str) -> str:
    """Return the entry text without its weight suffix."""
    return parse_weighted_item(item).value


def choose_weighted(items: list[WeightedItem], rng: random.Random | None = None) -> str:
    """
    Pick one value with probability proportional to its weight.

    Never raises: an empty list yields "" and a list whose weights sum to
    zero (or less) yields its last item.

    Args:
        items: Parsed weighted items
        rng: Random source (module-level random if omitted)

    Returns:
        The chosen item's value
    """
    if not items:
        return ""

    rng = rng or random
    total = sum(item.weight for item in items)
    if total <= 0:
        return items[-1].value

    remaining = rng.random() * total
    for item in items:
        remaining -= item.weight
        if remaining <= 0:
            return item.value

    # Float drift can leave a sliver above zero
    return items[-1].value
