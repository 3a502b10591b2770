import json

from pomodoro_quest.tasks import TaskHistory


def test_blank_name_becomes_default(store, logger):
    history = TaskHistory(store, logger)
    assert history.record_completion("   ") == "Untitled task"
    assert history.record_completion(None) == "Untitled task"
    assert history.tasks == ["Untitled task"]
    assert len(history.completions) == 2


def test_suggestions_ordered_by_frequency(store, logger):
    history = TaskHistory(store, logger)
    for name in ["write report", "email", "code review", "email", "code review", "email"]:
        history.record_completion(name)
    assert history.suggestions() == ["email", "code review", "write report"]
    assert history.frequency() == {"write report": 1, "email": 3, "code review": 2}


def test_records_grouped_newest_date_first(store, logger):
    history = TaskHistory(store, logger)
    history.completions = [
        {"task_name": "a", "date": "2026-10-01", "timestamp": "2026-10-01T09:00:00"},
        {"task_name": "b", "date": "2026-10-03", "timestamp": "2026-10-03T09:00:00"},
        {"task_name": "a", "date": "2026-10-01", "timestamp": "2026-10-01T10:00:00"},
    ]
    grouped = history.records_by_date()
    assert list(grouped) == ["2026-10-03", "2026-10-01"]
    assert grouped["2026-10-01"] == {"a": 2}


def test_save_and_load(store, logger):
    history = TaskHistory(store, logger)
    history.record_completion("deep work")
    history.save()

    reloaded = TaskHistory(store, logger)
    reloaded.load()
    assert reloaded.tasks == ["deep work"]
    assert reloaded.completions[0]["task_name"] == "deep work"


def test_load_accepts_browser_layout(store, logger):
    store.put(
        "pomodoroTasks",
        json.dumps(
            {
                "tasks": ["reading"],
                "completions": [
                    {"taskName": "reading", "date": "2026-01-02", "timestamp": "2026-01-02T08:00:00"},
                    {"taskName": ""},
                    "junk",
                ],
            }
        ),
    )
    history = TaskHistory(store, logger)
    history.load()
    assert history.tasks == ["reading"]
    assert len(history.completions) == 1


def test_load_garbage_leaves_history_empty(store, logger):
    store.put("pomodoroTasks", "not json at all")
    history = TaskHistory(store, logger)
    history.load()
    assert history.tasks == []
    assert history.completions == []


def test_browser_dates_keep_their_order(store, logger):
    history = TaskHistory(store, logger)
    history.completions = [
        {"task_name": "a", "date": "Fri Oct 16 2026", "timestamp": ""},
        {"task_name": "b", "date": "Mon Oct 19 2026", "timestamp": ""},
        {"task_name": "c", "date": "garbage", "timestamp": ""},
        {"task_name": "d", "date": "2026-10-17", "timestamp": ""},
    ]
    assert list(history.records_by_date()) == [
        "Mon Oct 19 2026",
        "2026-10-17",
        "Fri Oct 16 2026",
        "garbage",
    ]
