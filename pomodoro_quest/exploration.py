import time
import random
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable

from .catalog import ItemCatalog
from .config import BOX_INTERVAL_SEC, MAX_BOXES, COMPLETION_EXP
from .loot import determine_rarity, pick_item
from .profile import PlayerProfile


@dataclass
class Box:
    rarity: str
    item: str | None = None


@dataclass
class ExplorationSession:
    started_at: float
    boxes: list[Box] = field(default_factory=list)

    def rarities(self) -> list[str]:
        return [b.rarity for b in self.boxes]


@dataclass
class ExplorationResult:
    resolved_items: list[tuple[str, str]]
    experience_gained: int
    leveled_up: bool
    level: int = 1
    new_discoveries: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "resolvedItems": [{"name": n, "rarity": r} for n, r in self.resolved_items],
            "experienceGained": self.experience_gained,
            "leveledUp": self.leveled_up,
        }


def expected_box_count(elapsed_sec: float) -> int:
    if elapsed_sec <= 0:
        return 0
    return min(MAX_BOXES, int(elapsed_sec // BOX_INTERVAL_SEC))


class ExplorationEngine:
    def __init__(
        self,
        profile: PlayerProfile,
        logger: logging.Logger,
        catalog: ItemCatalog | None = None,
        rng=None,
        clock: Callable[[], float] = time.time,
    ):
        self.profile = profile
        self._logger = logger
        self._catalog = catalog
        self._rng = rng if rng is not None else random.Random()
        self._clock = clock
        self._lock = threading.RLock()

        self._active: ExplorationSession | None = None
        # Sessions completed while the catalog was still loading, oldest first.
        self._deferred: list[ExplorationSession] = []

    @property
    def catalog(self) -> ItemCatalog | None:
        return self._catalog

    def set_catalog(self, catalog: ItemCatalog) -> None:
        with self._lock:
            self._catalog = catalog
        self._logger.info(f"Catalog ready source={catalog.source}")

    def is_exploring(self) -> bool:
        with self._lock:
            return self._active is not None

    def has_deferred(self) -> bool:
        with self._lock:
            return bool(self._deferred)

    def queued_rarities(self) -> list[str]:
        with self._lock:
            if self._active is not None:
                return self._active.rarities()
            return [r for s in self._deferred for r in s.rarities()]

    def start_exploration(self, now: float | None = None) -> None:
        with self._lock:
            if self._active is not None:
                self._logger.warning("Exploration restarted before the previous one ended")
            self._active = ExplorationSession(started_at=self._clock() if now is None else now)
        self._logger.info("Exploration start")

    def sample_tick(self, now: float | None = None) -> int:
        with self._lock:
            session = self._active
            if session is None:
                return 0
            if now is None:
                now = self._clock()
            expected = expected_box_count(now - session.started_at)
            added = 0
            while len(session.boxes) < expected:
                rarity = determine_rarity(self.profile.level, self._rng)
                session.boxes.append(Box(rarity=rarity))
                added += 1
                self._logger.info(f"Box found rarity={rarity} queued={len(session.boxes)}")
            return added

    def cancel_exploration(self) -> None:
        with self._lock:
            session = self._active
            self._active = None
        if session is not None:
            self._logger.info(f"Exploration cancelled boxes_discarded={len(session.boxes)}")

    def resolve_exploration(self) -> ExplorationResult | None:
        """Turn the queued boxes into items and credit the profile.

        Returns None when the catalog has not loaded yet; the queue is then
        kept aside and ``resolve_deferred`` finishes the job later.
        """
        with self._lock:
            session = self._active
            self._active = None
            if session is None:
                session = ExplorationSession(started_at=self._clock())
            if self._catalog is None:
                self._deferred.append(session)
                self._logger.warning(
                    f"Catalog not loaded, deferring resolution boxes={len(session.boxes)}"
                )
                return None
            return self._resolve(session, self._catalog)

    def resolve_deferred(self) -> ExplorationResult | None:
        with self._lock:
            if not self._deferred or self._catalog is None:
                return None
            session = self._deferred.pop(0)
            return self._resolve(session, self._catalog)

    def _resolve(self, session: ExplorationSession, catalog: ItemCatalog) -> ExplorationResult:
        profile = self.profile
        resolved: list[tuple[str, str]] = []
        discoveries: list[str] = []
        bonus = 0

        for box in session.boxes:
            box.item = pick_item(catalog, box.rarity, self._rng)
            resolved.append((box.item, box.rarity))
            if profile.add_item(box.item, box.rarity):
                discoveries.append(box.item)
            bonus += catalog.bonus_for(box.rarity)

        gained = COMPLETION_EXP + bonus
        profile.total_items_found += len(resolved)
        profile.total_sessions_completed += 1
        leveled_up = profile.add_experience(gained)

        self._logger.info(
            f"Exploration resolved items={len(resolved)} exp=+{gained} "
            f"level={profile.level} leveled_up={leveled_up}"
        )
        return ExplorationResult(
            resolved_items=resolved,
            experience_gained=gained,
            leveled_up=leveled_up,
            level=profile.level,
            new_discoveries=discoveries,
        )
