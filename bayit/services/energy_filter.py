"""Energy-level filtering of task lists for low-capacity days."""

from collections.abc import Sequence
from enum import StrEnum
from typing import Literal, Protocol, TypeVar

from bayit.core.config import Constants


Difficulty = Literal[1, 2, 3]


class EnergyLevel(StrEnum):
    """How much the user is up for today."""

    ALL = "all"
    MODERATE = "moderate"
    LIGHT = "light"


# Titles are matched case-insensitively by substring; Hebrew entries cover the seeded task catalogue.
HEAVY_KEYWORDS: tuple[str, ...] = (
    "deep",
    "organiz",
    "thorough",
    "windows",
    "oven",
    "עמוק",
    "ארגון",
    "יסודי",
    "חלונות",
    "תנור",
)
LIGHT_KEYWORDS: tuple[str, ...] = ("quick", "water", "air out", "check", "מהיר", "מים", "איוורור", "בדיקת")

_MAX_DIFFICULTY: dict[EnergyLevel, int] = {
    EnergyLevel.ALL: 3,
    EnergyLevel.MODERATE: 2,
    EnergyLevel.LIGHT: 1,
}

_LABELS: dict[EnergyLevel, str] = {
    EnergyLevel.ALL: "All tasks",
    EnergyLevel.MODERATE: "Moderate",
    EnergyLevel.LIGHT: "Light",
}

_EMOJIS: dict[EnergyLevel, str] = {
    EnergyLevel.ALL: "\U0001f4aa",
    EnergyLevel.MODERATE: "\U0001f60a",
    EnergyLevel.LIGHT: "\U0001f634",
}

_DESCRIPTIONS: dict[EnergyLevel, str] = {
    EnergyLevel.ALL: "Showing every task",
    EnergyLevel.MODERATE: "Light and moderate tasks only",
    EnergyLevel.LIGHT: "Only light, quick tasks",
}


class EnergyTask(Protocol):
    title: str
    estimated_minutes: int


T = TypeVar("T", bound=EnergyTask)


def infer_difficulty(task: EnergyTask) -> Difficulty:
    """Classify a task as 1 (light), 2 (moderate) or 3 (heavy).

    Heavy keywords win over light keywords, and any keyword wins over the
    estimated duration.
    """
    title = task.title.lower()

    if any(keyword in title for keyword in HEAVY_KEYWORDS):
        return 3

    if any(keyword in title for keyword in LIGHT_KEYWORDS):
        return 1

    if task.estimated_minutes <= Constants.ENERGY_LIGHT_MAX_MINUTES:
        return 1
    if task.estimated_minutes >= Constants.ENERGY_HEAVY_MIN_MINUTES:
        return 3
    return 2


def filter_tasks_by_energy(tasks: Sequence[T], energy_level: EnergyLevel | str) -> list[T]:
    """Keep the tasks whose difficulty fits the energy level, preserving order.

    Always returns a new list; the input is never modified.
    """
    level = EnergyLevel(energy_level)
    if level == EnergyLevel.ALL:
        return list(tasks)

    max_difficulty = _MAX_DIFFICULTY[level]
    return [task for task in tasks if infer_difficulty(task) <= max_difficulty]


def get_energy_label(level: EnergyLevel | str) -> str:
    return _LABELS[EnergyLevel(level)]


def get_energy_emoji(level: EnergyLevel | str) -> str:
    return _EMOJIS[EnergyLevel(level)]


def get_energy_description(level: EnergyLevel | str) -> str:
    return _DESCRIPTIONS[EnergyLevel(level)]
