import time
import logging
import threading
from typing import Callable

from .catalog import CatalogLoader
from .config import CATALOG_FILE, STORE_DIR
from .exploration import ExplorationEngine, ExplorationResult
from .profile import ProfileStore
from .storage import BlobStore
from .tasks import TaskHistory
from .timer import SessionTimer


class PomodoroSession:
    """Everything one running app needs, wired around a single tick.

    The host calls ``tick`` once a second; the timer countdown, box growth
    and completion handling all happen inside that one call.
    """

    def __init__(
        self,
        timer: SessionTimer,
        engine: ExplorationEngine,
        tasks: TaskHistory,
        profiles: ProfileStore,
        logger: logging.Logger,
    ):
        self.timer = timer
        self.engine = engine
        self.tasks = tasks
        self.profiles = profiles
        self._logger = logger
        self._lock = threading.RLock()
        self.task_name = ""
        self.last_result: ExplorationResult | None = None

    @property
    def is_running(self) -> bool:
        return self.timer.is_running

    def start(self) -> bool:
        with self._lock:
            if not self.timer.start():
                return False
            self.engine.start_exploration(self.timer.started_at)
            return True

    def stop(self) -> None:
        with self._lock:
            self.timer.stop()
            self.engine.cancel_exploration()

    def toggle(self) -> bool:
        with self._lock:
            if self.timer.is_running:
                self.stop()
                return False
            return self.start()

    def reset(self) -> None:
        with self._lock:
            self.timer.reset()
            self.engine.cancel_exploration()

    def tick(self, now: float | None = None) -> ExplorationResult | None:
        with self._lock:
            if now is None:
                now = self.timer.now()

            result = None
            if self.timer.is_running:
                completed = self.timer.tick(now)
                self.engine.sample_tick(now)
                if completed:
                    result = self._complete()

            if result is None and self.engine.has_deferred():
                result = self.engine.resolve_deferred()
                if result is not None:
                    self._finish(result)
            return result

    def flush_deferred(self) -> list[ExplorationResult]:
        """Resolve every session still waiting on the catalog, oldest first."""
        results = []
        with self._lock:
            while self.engine.has_deferred():
                result = self.engine.resolve_deferred()
                if result is None:
                    self._logger.warning("Catalog still missing, pending rewards not granted")
                    break
                self._finish(result)
                results.append(result)
        return results

    def _complete(self) -> ExplorationResult | None:
        self.tasks.record_completion(self.task_name)
        self.tasks.save()
        result = self.engine.resolve_exploration()
        self.timer.reset()
        if result is not None:
            self._finish(result)
        return result

    def _finish(self, result: ExplorationResult) -> None:
        self.profiles.save(self.engine.profile)
        self.last_result = result
        if result.leveled_up:
            self._logger.info(f"Level up level={result.level}")

    def snapshot(self) -> dict:
        with self._lock:
            profile = self.engine.profile
            snap = {
                "running": self.timer.is_running,
                "remaining_sec": self.timer.remaining_sec,
                "level": profile.level,
                "experience": profile.experience,
                "experience_in_level": profile.experience_in_level,
                "title": profile.title,
                "floor": profile.floor,
                "total_items_found": profile.total_items_found,
                "total_sessions_completed": profile.total_sessions_completed,
                "rarity_counts": profile.rarity_counts(),
                "queued_boxes": self.engine.queued_rarities(),
                "collection": None,
            }
            catalog = self.engine.catalog
            if catalog is not None:
                found, total, pct = profile.collection_progress(catalog)
                snap["collection"] = {"found": found, "total": total, "percent": pct}
            return snap


def open_session(
    logger: logging.Logger,
    store_dir: str = STORE_DIR,
    catalog_path: str | None = CATALOG_FILE,
    rng=None,
    clock: Callable[[], float] = time.time,
) -> tuple[PomodoroSession, CatalogLoader]:
    store = BlobStore(store_dir)
    profiles = ProfileStore(store, logger)
    tasks = TaskHistory(store, logger)
    tasks.load()

    engine = ExplorationEngine(profiles.load(), logger, rng=rng, clock=clock)
    timer = SessionTimer(logger, clock=clock)
    loader = CatalogLoader(catalog_path, logger, on_ready=engine.set_catalog)
    loader.start()

    return PomodoroSession(timer, engine, tasks, profiles, logger), loader
