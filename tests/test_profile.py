import json
import random

from pomodoro_quest.catalog import COMMON, RARE, EPIC
from pomodoro_quest.profile import (
    PlayerProfile,
    ProfileStore,
    floor_for_sessions,
    level_for_experience,
    title_for_level,
)


def test_fresh_profile_defaults():
    p = PlayerProfile()
    assert p.level == 1
    assert p.experience == 0
    assert p.inventory == {}
    assert p.discovered_rarity == {}
    assert p.floor == 1


def test_level_tracks_experience_after_every_addition():
    rng = random.Random(3)
    p = PlayerProfile()
    for _ in range(300):
        p.add_experience(rng.randint(0, 180))
        assert p.level == p.experience // 100 + 1


def test_add_experience_reports_level_up():
    p = PlayerProfile(experience=90)
    assert p.add_experience(5) is False
    assert p.add_experience(5) is True
    assert p.level == 2
    assert p.experience_in_level == 0


def test_first_discovery_wins():
    p = PlayerProfile()
    assert p.add_item("Old Coin", COMMON) is True
    assert p.add_item("Old Coin", EPIC) is False
    assert p.inventory["Old Coin"] == 2
    assert p.discovered_rarity["Old Coin"] == COMMON


def test_floor_and_titles():
    assert floor_for_sessions(0) == 1
    assert floor_for_sessions(9) == 1
    assert floor_for_sessions(10) == 2
    assert title_for_level(1) == "Novice Pomodoro-er"
    assert title_for_level(5) == "Pomodoro Regular"
    assert title_for_level(49) == "Pomodoro Virtuoso"
    assert title_for_level(99) == "Pomodoro Master"
    assert level_for_experience(250) == 3


def test_rarity_counts_and_collection(catalog):
    p = PlayerProfile()
    p.add_item("Old Coin", COMMON)
    p.add_item("Old Coin", COMMON)
    p.add_item("Silver Ring", RARE)
    assert p.rarity_counts() == {"common": 2, "rare": 1, "epic": 0, "legendary": 0}
    assert p.collection_progress(catalog) == (2, 20, 10)


def test_round_trip_keeps_everything():
    p = PlayerProfile(experience=345, total_items_found=4, total_sessions_completed=3)
    p.add_item("Dragon Scale", EPIC)
    restored = PlayerProfile.from_dict(json.loads(json.dumps(p.to_dict())))
    assert restored.to_dict() == p.to_dict()
    assert restored.level == 4


def test_from_dict_migrates_browser_layout():
    legacy = {
        "level": 7,
        "exp": 150,
        "totalItems": 3,
        "inventory": {"Old Coin": 2, "Magic Crystal": 1},
        "discoveredItems": {"Old Coin": "common", "Magic Crystal": "rare"},
        "totalPomodoros": 2,
    }
    p = PlayerProfile.from_dict(legacy)
    assert p.experience == 150
    # Stored level is recomputed from experience.
    assert p.level == 2
    assert p.total_items_found == 3
    assert p.total_sessions_completed == 2
    assert p.discovered_rarity == {"Old Coin": "common", "Magic Crystal": "rare"}


def test_from_dict_repairs_broken_entries():
    data = {
        "schema": 1,
        "experience": -20,
        "inventory": {"Old Coin": 0, "Silver Ring": 2, "Orphan": 1},
        "discovered_rarity": {"Old Coin": "common", "Silver Ring": "rare", "Ghost": "epic"},
        "total_items_found": "oops",
    }
    p = PlayerProfile.from_dict(data)
    assert p.experience == 0
    assert p.level == 1
    assert p.inventory == {"Silver Ring": 2}
    assert p.discovered_rarity == {"Silver Ring": "rare"}
    assert p.total_items_found == 0


def test_store_missing_key_gives_fresh_profile(store, logger):
    assert ProfileStore(store, logger).load().to_dict() == PlayerProfile().to_dict()


def test_store_garbage_gives_fresh_profile(store, logger):
    store.put("pomodoroGameData", "{not json")
    assert ProfileStore(store, logger).load().level == 1

    store.put("pomodoroGameData", "[1, 2, 3]")
    assert ProfileStore(store, logger).load().experience == 0


def test_store_save_then_load(store, logger):
    profiles = ProfileStore(store, logger)
    p = PlayerProfile(experience=120, total_sessions_completed=1)
    p.add_item("Holy Shield", EPIC)
    profiles.save(p)
    loaded = profiles.load()
    assert loaded.level == 2
    assert loaded.inventory == {"Holy Shield": 1}


def test_store_huge_numbers_give_fresh_or_clamped_profile(store, logger):
    store.put("pomodoroGameData", '{"schema": 1, "experience": 1e999}')
    p = ProfileStore(store, logger).load()
    assert p.experience == 0
    assert p.level == 1

    store.put("pomodoroGameData", '{"exp": 1e400, "inventory": {"Old Coin": 1e999}}')
    p = ProfileStore(store, logger).load()
    assert p.experience == 0
    assert p.inventory == {}


def test_store_infinity_literal_does_not_raise(store, logger):
    store.put("pomodoroGameData", '{"schema": 1, "experience": Infinity, "total_items_found": -Infinity}')
    p = ProfileStore(store, logger).load()
    assert p.level == 1
    assert p.total_items_found == 0
