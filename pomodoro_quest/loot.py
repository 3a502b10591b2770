"""Random draws for exploration rewards.

Both draws take the random source as an argument; anything with a
``random()`` method returning floats in [0, 1) works, ``random.Random``
included.
"""

from .catalog import COMMON, RARE, EPIC, LEGENDARY, ItemCatalog
from .config import LEVEL_RARITY_BONUS

# Upper bounds of the roll in [0, 100) before the level bonus is added,
# highest tier first.
RARITY_THRESHOLDS = (
    (LEGENDARY, 0.5),
    (EPIC, 4.0),
    (RARE, 15.0),
)


def level_bonus(level: int) -> float:
    return (max(1, int(level)) - 1) * LEVEL_RARITY_BONUS


def rarity_for_roll(roll: float, level: int = 1) -> str:
    # No clamp on the bonus: once it passes 99.5 every roll is legendary.
    bonus = level_bonus(level)
    for rarity, threshold in RARITY_THRESHOLDS:
        if roll < threshold + bonus:
            return rarity
    return COMMON


def determine_rarity(level: int, rng) -> str:
    return rarity_for_roll(rng.random() * 100.0, level)


def pick_item(catalog: ItemCatalog, rarity: str, rng) -> str:
    items = catalog.items_for(rarity)
    idx = min(int(rng.random() * len(items)), len(items) - 1)
    return items[idx]
