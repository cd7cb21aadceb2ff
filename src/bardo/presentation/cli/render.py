"""Shared CLI rendering helpers."""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, Sequence

from bardo.domain.inventory import InventoryStore
from bardo.domain.interpreter import Choice
from bardo.domain.saves import SaveRecord
from bardo.domain.stats import StatInfo
from bardo.services.achievement_service import AchievementProgress, AchievementView


def render_heading(title: str) -> None:
    """Print a consistent section heading."""
    print(f"\n=== {title} ===")


def render_menu(title: str, options: Sequence[str]) -> None:
    """Display a menu section with numbered options."""
    render_heading(title)
    for idx, label in enumerate(options, start=1):
        print(f"{idx}. {label}")


def render_story_text(text: str, mode: str, wait: Callable[[str], str] = input) -> None:
    """Print narrative text at once, or one paragraph per keypress in ``step`` mode."""
    paragraphs = [paragraph for paragraph in text.split("\n\n") if paragraph.strip()]
    for idx, paragraph in enumerate(paragraphs):
        print(paragraph)
        if idx < len(paragraphs) - 1:
            if mode == "step":
                wait("")
            else:
                print()


def render_choices(choices: Sequence[Choice]) -> None:
    """Display numbered story choices."""
    if not choices:
        return
    render_heading("Choices")
    for idx, choice in enumerate(choices, start=1):
        print(f"{idx}. {choice.text}")


def render_effects(tags: Iterable[str]) -> None:
    for tag in tags:
        print(f"[{tag}]")


def format_stat(info: StatInfo) -> str:
    definition = info.definition
    value = f"{info.current:g}"
    if definition.display_kind == "bar" and definition.max is not None:
        value = f"{value}/{definition.max:g}"
    prefix = f"{definition.icon} " if definition.icon else ""
    return f"{prefix}{definition.label} {value}"


def render_status(stats: Sequence[StatInfo], inventory: InventoryStore) -> None:
    """Print a one-line stat summary and the inventory contents."""
    if stats:
        print(" | ".join(format_stat(info) for info in stats))
    slots = inventory.slots
    if slots:
        labels = []
        for slot in slots:
            item_def = inventory.item_def(slot.item_id)
            name = item_def.name if item_def is not None else slot.item_id
            labels.append(f"{name} x{slot.qty}" if slot.qty > 1 else name)
        print(f"Inventory ({len(slots)}/{inventory.max_slots}): {', '.join(labels)}")


def format_save(record: SaveRecord) -> str:
    saved_at = datetime.fromtimestamp(record.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
    return f"{record.name} ({saved_at})"


def render_achievements(views: Sequence[AchievementView], progress: AchievementProgress) -> None:
    render_heading(f"Achievements {progress.unlocked}/{progress.total} ({progress.percentage}%)")
    if not views:
        print("This story has no achievements.")
    for view in views:
        marker = view.definition.icon if view.unlocked else "🔒"
        print(f"{marker} {view.display_title} - {view.display_description}")


def render_toast(view_title: str) -> None:
    print(f"\n*** Achievement unlocked: {view_title} ***")
