import os

APP_TITLE = "Pomodoro Quest"
APPDATA_DIR = os.getenv("POMODORO_QUEST_HOME") or os.path.join(
    os.getenv("APPDATA") or os.path.expanduser("~"), "PomodoroQuest"
)

STORE_DIR = os.path.join(APPDATA_DIR, "store")
CATALOG_FILE = os.path.join(APPDATA_DIR, "items.json")

PROFILE_KEY = "pomodoroGameData"
TASKS_KEY = "pomodoroTasks"

LOG_DIR = os.path.join(APPDATA_DIR, "logs")
LOG_FILE = os.path.join(LOG_DIR, "pomodoro_quest.log")

TICK_INTERVAL_SEC = 1.0
CATALOG_WAIT_ON_QUIT_SEC = 2.0
TIMER_DURATION_SEC = 25 * 60

# Exploration
BOX_INTERVAL_SEC = 5 * 60
MAX_BOXES = 5

# Progression
COMPLETION_EXP = 100
EXP_PER_LEVEL = 100
LEVEL_RARITY_BONUS = 0.5
SESSIONS_PER_FLOOR = 10

DEFAULT_TASK_NAME = "Untitled task"
