import json
import logging

from .catalog import RARITIES, ItemCatalog
from .config import EXP_PER_LEVEL, SESSIONS_PER_FLOOR, PROFILE_KEY
from .storage import BlobStore

SCHEMA_VERSION = 1

# (minimum level, title), highest first.
LEVEL_TITLES = (
    (50, "Pomodoro Master"),
    (40, "Tour Guide"),
    (30, "Pomodoro Virtuoso"),
    (25, "Lover of Long Walks"),
    (20, "Devoted Pomodoro-er"),
    (15, "Skilled Collector"),
    (10, "25-Minute Explorer"),
    (5, "Pomodoro Regular"),
    (1, "Novice Pomodoro-er"),
)


def level_for_experience(experience: int) -> int:
    return max(0, int(experience)) // EXP_PER_LEVEL + 1


def floor_for_sessions(total_sessions: int) -> int:
    return max(0, int(total_sessions)) // SESSIONS_PER_FLOOR + 1


def title_for_level(level: int) -> str:
    for min_level, title in LEVEL_TITLES:
        if level >= min_level:
            return title
    return LEVEL_TITLES[-1][1]


def _as_count(value) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, n)


class PlayerProfile:
    def __init__(
        self,
        experience: int = 0,
        total_items_found: int = 0,
        total_sessions_completed: int = 0,
        inventory: dict[str, int] | None = None,
        discovered_rarity: dict[str, str] | None = None,
    ):
        self.experience = max(0, int(experience))
        self.level = level_for_experience(self.experience)
        self.total_items_found = max(0, int(total_items_found))
        self.total_sessions_completed = max(0, int(total_sessions_completed))
        self.inventory: dict[str, int] = dict(inventory or {})
        self.discovered_rarity: dict[str, str] = dict(discovered_rarity or {})

    def add_experience(self, amount: int) -> bool:
        old_level = self.level
        self.experience = max(0, self.experience + int(amount))
        self.level = level_for_experience(self.experience)
        return self.level > old_level

    def add_item(self, name: str, rarity: str) -> bool:
        """Count one find of ``name``; returns True on first discovery.

        The rarity recorded on first discovery is kept for good.
        """
        self.inventory[name] = self.inventory.get(name, 0) + 1
        if name in self.discovered_rarity:
            return False
        self.discovered_rarity[name] = rarity
        return True

    @property
    def experience_in_level(self) -> int:
        return self.experience % EXP_PER_LEVEL

    @property
    def floor(self) -> int:
        return floor_for_sessions(self.total_sessions_completed)

    @property
    def title(self) -> str:
        return title_for_level(self.level)

    def rarity_counts(self) -> dict[str, int]:
        counts = {r: 0 for r in RARITIES}
        for name, count in self.inventory.items():
            rarity = self.discovered_rarity.get(name)
            if rarity in counts:
                counts[rarity] += count
        return counts

    def collection_progress(self, catalog: ItemCatalog) -> tuple[int, int, int]:
        total = catalog.size()
        known = {name for name, _ in catalog.all_items()}
        found = sum(1 for name in self.discovered_rarity if name in known)
        pct = round(found * 100 / total) if total > 0 else 0
        return found, total, pct

    def to_dict(self) -> dict:
        return {
            "schema": SCHEMA_VERSION,
            "level": self.level,
            "experience": self.experience,
            "total_items_found": self.total_items_found,
            "total_sessions_completed": self.total_sessions_completed,
            "inventory": dict(self.inventory),
            "discovered_rarity": dict(self.discovered_rarity),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PlayerProfile":
        if not isinstance(data, dict):
            raise ValueError("profile data must be an object")

        if "schema" not in data:
            # Unversioned camelCase layout written by the browser version.
            data = {
                "experience": data.get("exp", 0),
                "total_items_found": data.get("totalItems", 0),
                "total_sessions_completed": data.get("totalPomodoros", 0),
                "inventory": data.get("inventory", {}),
                "discovered_rarity": data.get("discoveredItems", {}),
            }

        raw_inventory = data.get("inventory")
        raw_discovered = data.get("discovered_rarity")
        if not isinstance(raw_inventory, dict):
            raw_inventory = {}
        if not isinstance(raw_discovered, dict):
            raw_discovered = {}

        inventory: dict[str, int] = {}
        for name, count in raw_inventory.items():
            n = _as_count(count)
            if n >= 1:
                inventory[str(name)] = n

        discovered: dict[str, str] = {}
        for name, rarity in raw_discovered.items():
            if rarity in RARITIES:
                discovered[str(name)] = rarity

        # Keep inventory and discovery log keyed on the same names.
        shared = inventory.keys() & discovered.keys()
        return cls(
            experience=_as_count(data.get("experience", 0)),
            total_items_found=_as_count(data.get("total_items_found", 0)),
            total_sessions_completed=_as_count(data.get("total_sessions_completed", 0)),
            inventory={k: v for k, v in inventory.items() if k in shared},
            discovered_rarity={k: v for k, v in discovered.items() if k in shared},
        )


class ProfileStore:
    def __init__(self, store: BlobStore, logger: logging.Logger, key: str = PROFILE_KEY):
        self._store = store
        self._logger = logger
        self._key = key

    def load(self) -> PlayerProfile:
        try:
            raw = self._store.get(self._key)
        except (OSError, ValueError):
            self._logger.exception("Profile read failed, starting fresh")
            return PlayerProfile()
        if raw is None:
            return PlayerProfile()
        try:
            profile = PlayerProfile.from_dict(json.loads(raw))
        except (ValueError, TypeError, OverflowError):
            self._logger.exception("Profile data unreadable, starting fresh")
            return PlayerProfile()
        self._logger.info(
            f"Profile loaded level={profile.level} exp={profile.experience} "
            f"sessions={profile.total_sessions_completed}"
        )
        return profile

    def save(self, profile: PlayerProfile) -> None:
        try:
            self._store.put(self._key, json.dumps(profile.to_dict(), indent=2, ensure_ascii=False))
        except OSError:
            self._logger.exception("Profile save failed")
