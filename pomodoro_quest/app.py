import customtkinter as ctk

from .catalog import RARITIES
from .config import (
    APP_TITLE,
    APPDATA_DIR,
    CATALOG_FILE,
    CATALOG_WAIT_ON_QUIT_SEC,
    EXP_PER_LEVEL,
    STORE_DIR,
    TICK_INTERVAL_SEC,
)
from .exploration import ExplorationResult
from .logging_setup import setup_logger
from .session import open_session
from .utils import ensure_dir, seconds_to_mmss


ctk.set_appearance_mode("Dark")
ctk.set_default_color_theme("blue")

RARITY_COLORS = {
    "common": "#8B4513",
    "rare": "#4169E1",
    "epic": "#9932CC",
    "legendary": "#FFD700",
}


class PomodoroQuestApp:
    def __init__(self):
        ensure_dir(APPDATA_DIR)

        self.logger = setup_logger()
        self.logger.info("App start")

        self.session, self.catalog_loader = open_session(
            self.logger,
            store_dir=STORE_DIR,
            catalog_path=CATALOG_FILE,
        )

        self.root = ctk.CTk()
        self.root.title(APP_TITLE)
        self.root.geometry("420x640")
        self.root.minsize(420, 640)
        self.root.protocol("WM_DELETE_WINDOW", self.quit_app)

        self._tick_ms = int(TICK_INTERVAL_SEC * 1000)
        self._tick_job = None

        self._build_ui()
        self._refresh_ui()
        self._refresh_records()
        self._schedule_tick()

    # UI
    def _build_ui(self) -> None:
        self.header = ctk.CTkLabel(self.root, text=APP_TITLE, font=("Roboto", 26, "bold"))
        self.header.pack(pady=(18, 8))

        self.frame_player = ctk.CTkFrame(self.root)
        self.frame_player.pack(padx=18, pady=(6, 10), fill="x")

        self.level_label = ctk.CTkLabel(self.frame_player, text="Lv.1", font=("Arial", 16, "bold"))
        self.level_label.grid(row=0, column=0, sticky="w", padx=12, pady=(10, 4))

        self.floor_label = ctk.CTkLabel(self.frame_player, text="Floor 1F", text_color="gray")
        self.floor_label.grid(row=0, column=1, sticky="e", padx=12, pady=(10, 4))

        self.exp_label = ctk.CTkLabel(self.frame_player, text=f"EXP 0 / {EXP_PER_LEVEL}", anchor="w")
        self.exp_label.grid(row=1, column=0, sticky="w", padx=12, pady=2)

        self.items_label = ctk.CTkLabel(self.frame_player, text="Items: 0", anchor="w")
        self.items_label.grid(row=1, column=1, sticky="e", padx=12, pady=2)

        self.rarity_label = ctk.CTkLabel(self.frame_player, text="", text_color="gray", anchor="w")
        self.rarity_label.grid(row=2, column=0, columnspan=2, sticky="w", padx=12, pady=2)

        self.exp_bar = ctk.CTkProgressBar(self.frame_player)
        self.exp_bar.grid(row=3, column=0, columnspan=2, sticky="ew", padx=12, pady=(6, 10))
        self.exp_bar.set(0.0)

        self.frame_player.grid_columnconfigure(0, weight=1)
        self.frame_player.grid_columnconfigure(1, weight=1)

        self.frame_timer = ctk.CTkFrame(self.root)
        self.frame_timer.pack(padx=18, pady=8, fill="x")

        self.timer_label = ctk.CTkLabel(self.frame_timer, text="25:00", font=("Roboto", 48, "bold"))
        self.timer_label.pack(pady=(12, 4))

        self.task_entry = ctk.CTkComboBox(self.frame_timer, values=self.session.tasks.suggestions())
        self.task_entry.set("")
        self.task_entry.pack(padx=12, pady=(4, 8), fill="x")

        self.start_btn = ctk.CTkButton(
            self.frame_timer,
            text="Start",
            fg_color="#c0392b",
            hover_color="#e74c3c",
            command=self.toggle_timer,
        )
        self.start_btn.pack(padx=12, pady=(0, 6), fill="x")

        self.reset_btn = ctk.CTkButton(
            self.frame_timer,
            text="Reset",
            fg_color="#7f8c8d",
            hover_color="#95a5a6",
            command=self.reset_timer,
        )
        self.reset_btn.pack(padx=12, pady=(0, 8), fill="x")

        self.boxes_label = ctk.CTkLabel(self.frame_timer, text="Boxes: (none yet)", text_color="gray")
        self.boxes_label.pack(anchor="w", padx=12, pady=(0, 12))

        self.frame_info = ctk.CTkFrame(self.root)
        self.frame_info.pack(padx=18, pady=8, fill="both", expand=True)

        ctk.CTkLabel(self.frame_info, text="Last exploration:", anchor="w").pack(
            fill="x", padx=12, pady=(10, 4)
        )
        self.result_box = ctk.CTkTextbox(self.frame_info, height=120)
        self.result_box.pack(fill="x", padx=12, pady=(0, 10))
        self.result_box.configure(state="disabled")

        ctk.CTkLabel(self.frame_info, text="Completed sessions:", anchor="w").pack(
            fill="x", padx=12, pady=(0, 4)
        )
        self.records_box = ctk.CTkTextbox(self.frame_info, height=140)
        self.records_box.pack(fill="both", expand=True, padx=12, pady=(0, 12))
        self.records_box.configure(state="disabled")

    def _set_text(self, box: ctk.CTkTextbox, content: str) -> None:
        box.configure(state="normal")
        box.delete("1.0", "end")
        box.insert("1.0", content)
        box.configure(state="disabled")

    def _refresh_ui(self) -> None:
        snap = self.session.snapshot()

        self.timer_label.configure(text=seconds_to_mmss(snap["remaining_sec"]))
        self.start_btn.configure(text="Stop" if snap["running"] else "Start")
        self.level_label.configure(text=f"Lv.{snap['level']}  {snap['title']}")
        self.floor_label.configure(text=f"Floor {snap['floor']}F")
        self.exp_label.configure(text=f"EXP {snap['experience_in_level']} / {EXP_PER_LEVEL}")
        self.exp_bar.set(snap["experience_in_level"] / EXP_PER_LEVEL)

        items_text = f"Items: {snap['total_items_found']}"
        if snap["collection"]:
            c = snap["collection"]
            items_text += f"  ({c['found']}/{c['total']} found)"
        self.items_label.configure(text=items_text)
        counts = snap["rarity_counts"]
        self.rarity_label.configure(text="  ".join(f"{r.capitalize()} {counts[r]}" for r in RARITIES))

        boxes = snap["queued_boxes"]
        self.boxes_label.configure(text="Boxes: " + (", ".join(boxes) if boxes else "(none yet)"))

    def _refresh_records(self) -> None:
        self.task_entry.configure(values=self.session.tasks.suggestions())
        grouped = self.session.tasks.records_by_date()
        if not grouped:
            self._set_text(self.records_box, "(no records yet)")
            return
        lines = []
        for date, tasks in grouped.items():
            lines.append(date)
            for name, count in tasks.items():
                lines.append(f"  {name}: {count} done")
        self._set_text(self.records_box, "\n".join(lines))

    def _show_result(self, result: ExplorationResult) -> None:
        catalog = self.session.engine.catalog
        lines = [f"EXP +{result.experience_gained}"]
        if result.leveled_up:
            lines.append(f"Level up! Lv.{result.level}")
        if not result.resolved_items:
            lines.append("No items this time.")
        for name, rarity in result.resolved_items:
            new = " (new!)" if name in result.new_discoveries else ""
            lines.append(f"- {name} [{rarity}]{new}")
            if catalog is not None and catalog.describe(name):
                lines.append(f"    {catalog.describe(name)}")
        self._set_text(self.result_box, "\n".join(lines))
        best = _best_rarity(result)
        if best is None:
            self.result_box.configure(text_color=ctk.ThemeManager.theme["CTkTextbox"]["text_color"])
        else:
            self.result_box.configure(text_color=RARITY_COLORS[best])
        self._refresh_records()

    # Controls
    def toggle_timer(self) -> None:
        self.session.task_name = self.task_entry.get()
        self.session.toggle()
        self._refresh_ui()

    def reset_timer(self) -> None:
        self.session.reset()
        self._refresh_ui()

    # Tick loop
    def _schedule_tick(self) -> None:
        self._tick_job = self.root.after(self._tick_ms, self._on_tick)

    def _on_tick(self) -> None:
        try:
            self.session.task_name = self.task_entry.get()
            result = self.session.tick()
            if result is not None:
                self._show_result(result)
            self._refresh_ui()
        except Exception:
            self.logger.exception("Tick failed")
        self._schedule_tick()

    def quit_app(self) -> None:
        self.logger.info("Quit requested")
        if self._tick_job is not None:
            self.root.after_cancel(self._tick_job)
            self._tick_job = None
        if self.session.is_running:
            self.session.stop()
        if self.session.engine.has_deferred():
            self.catalog_loader.wait(timeout=CATALOG_WAIT_ON_QUIT_SEC)
            self.session.flush_deferred()
        self.root.destroy()
        self.logger.info("App stopped")

    def run(self) -> None:
        self.root.mainloop()


def _best_rarity(result: ExplorationResult) -> str | None:
    rarities = [r for _, r in result.resolved_items]
    if not rarities:
        return None
    return max(rarities, key=RARITIES.index)


def main() -> None:
    PomodoroQuestApp().run()
