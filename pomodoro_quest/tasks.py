import json
import logging
import datetime

from .config import DEFAULT_TASK_NAME, TASKS_KEY
from .storage import BlobStore
from .utils import today_str, now_iso


class TaskHistory:
    def __init__(self, store: BlobStore, logger: logging.Logger, key: str = TASKS_KEY):
        self._store = store
        self._logger = logger
        self._key = key
        self.tasks: list[str] = []
        self.completions: list[dict] = []

    def load(self) -> None:
        try:
            raw = self._store.get(self._key)
            if raw is None:
                return
            data = json.loads(raw)
        except (OSError, ValueError):
            self._logger.exception("Task history load failed, starting fresh")
            return
        if not isinstance(data, dict):
            self._logger.warning("Task history has unexpected shape, starting fresh")
            return

        tasks = [str(t) for t in (data.get("tasks") or []) if str(t).strip()]
        completions: list[dict] = []
        for c in data.get("completions") or []:
            if not isinstance(c, dict):
                continue
            name = str(c.get("task_name") or c.get("taskName") or "").strip()
            if not name:
                continue
            completions.append(
                {
                    "task_name": name,
                    "date": str(c.get("date", "")),
                    "timestamp": str(c.get("timestamp", "")),
                }
            )
        self.tasks = list(dict.fromkeys(tasks))
        self.completions = completions

    def save(self) -> None:
        data = {"tasks": self.tasks, "completions": self.completions}
        try:
            self._store.put(self._key, json.dumps(data, indent=2, ensure_ascii=False))
        except OSError:
            self._logger.exception("Task history save failed")

    def record_completion(self, task_name: str | None) -> str:
        name = (task_name or "").strip() or DEFAULT_TASK_NAME
        if name not in self.tasks:
            self.tasks.append(name)
        self.completions.append(
            {
                "task_name": name,
                "date": today_str(),
                "timestamp": now_iso(),
            }
        )
        self._logger.info(f"Task completed name={name!r} total={len(self.completions)}")
        return name

    def frequency(self) -> dict[str, int]:
        freq: dict[str, int] = {}
        for c in self.completions:
            freq[c["task_name"]] = freq.get(c["task_name"], 0) + 1
        return freq

    def suggestions(self) -> list[str]:
        freq = self.frequency()
        return sorted(self.tasks, key=lambda t: freq.get(t, 0), reverse=True)

    def records_by_date(self) -> dict[str, dict[str, int]]:
        grouped: dict[str, dict[str, int]] = {}
        for c in self.completions:
            day = grouped.setdefault(c["date"], {})
            day[c["task_name"]] = day.get(c["task_name"], 0) + 1
        return dict(sorted(grouped.items(), key=lambda kv: _date_key(kv[0]), reverse=True))


def _date_key(date: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(date)
    except ValueError:
        pass
    # Browser version stored dates like "Mon Oct 19 2026".
    try:
        return datetime.datetime.strptime(date, "%a %b %d %Y").date()
    except ValueError:
        return datetime.date.min
