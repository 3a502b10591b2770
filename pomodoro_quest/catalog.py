import os
import json
import logging
import threading
from typing import Callable

COMMON = "common"
RARE = "rare"
EPIC = "epic"
LEGENDARY = "legendary"

# Lowest to highest.
RARITIES = (COMMON, RARE, EPIC, LEGENDARY)


class CatalogError(ValueError):
    pass


class ItemCatalog:
    def __init__(
        self,
        items_by_rarity: dict[str, list[str]],
        descriptions: dict[str, str],
        experience_bonus: dict[str, int],
        source: str = "builtin",
    ):
        self.items_by_rarity = {r: list(items_by_rarity[r]) for r in RARITIES}
        self.descriptions = dict(descriptions)
        self.experience_bonus = {r: int(experience_bonus[r]) for r in RARITIES}
        self.source = source

    @classmethod
    def from_dict(cls, data: dict, source: str = "file") -> "ItemCatalog":
        if not isinstance(data, dict):
            raise CatalogError("catalog document must be an object")

        items = data.get("items")
        bonuses = data.get("experienceBonuses")
        descriptions = data.get("descriptions") or {}
        if not isinstance(items, dict) or not isinstance(bonuses, dict):
            raise CatalogError("catalog needs 'items' and 'experienceBonuses' objects")
        if not isinstance(descriptions, dict):
            raise CatalogError("'descriptions' must be an object")

        for rarity in RARITIES:
            names = items.get(rarity)
            if not isinstance(names, list) or not names:
                raise CatalogError(f"no items for rarity {rarity!r}")
            if not all(isinstance(n, str) and n for n in names):
                raise CatalogError(f"bad item name under {rarity!r}")
            bonus = bonuses.get(rarity)
            if isinstance(bonus, bool) or not isinstance(bonus, int) or bonus < 0:
                raise CatalogError(f"bad experience bonus for {rarity!r}: {bonus!r}")

        return cls(
            items_by_rarity=items,
            descriptions={str(k): str(v) for k, v in descriptions.items()},
            experience_bonus=bonuses,
            source=source,
        )

    def items_for(self, rarity: str) -> list[str]:
        return self.items_by_rarity[rarity]

    def bonus_for(self, rarity: str) -> int:
        return self.experience_bonus[rarity]

    def describe(self, name: str) -> str:
        return self.descriptions.get(name, "")

    def all_items(self) -> list[tuple[str, str]]:
        return [(name, r) for r in RARITIES for name in self.items_by_rarity[r]]

    def size(self) -> int:
        return sum(len(v) for v in self.items_by_rarity.values())


BUILTIN_CATALOG = {
    "items": {
        COMMON: ["Old Coin", "Chipped Sword", "Mystery Seed", "Small Herb", "Tattered Map"],
        RARE: ["Magic Crystal", "Ancient Tome", "Glowing Stone", "Silver Ring", "Spirit Feather"],
        EPIC: ["Dragon Scale", "Sage's Staff", "Hourglass of Time", "Holy Shield", "Phoenix Plume"],
        LEGENDARY: [
            "World Tree Leaf",
            "Stone of Creation",
            "Infinite Knowledge",
            "Star Fragment",
            "Book of Truth",
        ],
    },
    "descriptions": {
        "Old Coin": "Old currency found in the labyrinth. It might still be worth something.",
        "Chipped Sword": "A worn blade with a nicked edge. Usable once repaired.",
        "Mystery Seed": "Seed of an unknown plant. What will it grow into?",
        "Small Herb": "A herb that restores stamina. Essential for any adventure.",
        "Tattered Map": "A torn old map. Does it mark a secret place?",
        "Magic Crystal": "A beautiful crystal holding magic. Warm to the touch.",
        "Ancient Tome": "A book in an ancient script. A treasury of knowledge.",
        "Glowing Stone": "A stone that shines even in darkness. A handy waymarker.",
        "Silver Ring": "A finely crafted silver ring. Looks expensive.",
        "Spirit Feather": "A feather shed by a wind spirit. Light and graceful.",
        "Dragon Scale": "Scale of a legendary dragon. Hard, and prized for armor.",
        "Sage's Staff": "The staff of an ancient sage. Wisdom dwells in it.",
        "Hourglass of Time": "A mysterious hourglass said to bend time.",
        "Holy Shield": "A shield blessed by the gods. It wards off every calamity.",
        "Phoenix Plume": "A phoenix feather said to hold the power of rebirth.",
        "World Tree Leaf": "A leaf of the great tree at the center of the world.",
        "Stone of Creation": "The stone said to have made the world. Endless potential.",
        "Infinite Knowledge": "A crystal holding all knowledge. A door to the truth.",
        "Star Fragment": "A shard of a fallen star. The mystery of the cosmos within.",
        "Book of Truth": "The ultimate book of the world's truths. It chooses its reader.",
    },
    "experienceBonuses": {
        COMMON: 0,
        RARE: 10,
        EPIC: 25,
        LEGENDARY: 50,
    },
}


def builtin_catalog() -> ItemCatalog:
    return ItemCatalog.from_dict(BUILTIN_CATALOG, source="builtin")


def load_catalog(path: str | None, logger: logging.Logger) -> ItemCatalog:
    if not path or not os.path.exists(path):
        logger.info(f"Catalog file not found ({path}), using built-in items")
        return builtin_catalog()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        catalog = ItemCatalog.from_dict(data, source=path)
    except (OSError, ValueError):
        logger.exception(f"Catalog load failed from {path}, using built-in items")
        return builtin_catalog()
    logger.info(f"Catalog loaded from {path} items={catalog.size()}")
    return catalog


class CatalogLoader:
    def __init__(
        self,
        path: str | None,
        logger: logging.Logger,
        on_ready: Callable[[ItemCatalog], None] | None = None,
    ):
        self._path = path
        self._logger = logger
        self._on_ready = on_ready
        self._catalog: ItemCatalog | None = None
        self._ready = threading.Event()
        self._thread = None

    @property
    def catalog(self) -> ItemCatalog | None:
        return self._catalog

    def is_ready(self) -> bool:
        return self._ready.is_set()

    def _run(self) -> None:
        try:
            catalog = load_catalog(self._path, self._logger)
        except Exception:
            self._logger.exception("Catalog loader crashed, using built-in items")
            catalog = builtin_catalog()
        self._catalog = catalog
        try:
            if self._on_ready is not None:
                self._on_ready(catalog)
        finally:
            self._ready.set()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="catalog-loader", daemon=True)
        self._thread.start()

    def wait(self, timeout: float | None = None) -> ItemCatalog | None:
        self._ready.wait(timeout)
        return self._catalog
