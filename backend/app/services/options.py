from __future__ import annotations

from dataclasses import dataclass

from ..core.errors import ValidationError


@dataclass(frozen=True)
class MoodOption:
    level: int
    emoji: str
    label: str
    color: str


MOOD_OPTIONS: tuple[MoodOption, ...] = (
    MoodOption(1, "😢", "Very Sad", "bg-red-500"),
    MoodOption(2, "😔", "Sad", "bg-orange-500"),
    MoodOption(3, "😐", "Neutral", "bg-yellow-500"),
    MoodOption(4, "😄", "Happy", "bg-green-500"),
    MoodOption(5, "😊", "Very Happy", "bg-blue-500"),
    MoodOption(6, "😠", "Angry", "bg-red-600"),
    MoodOption(7, "😍", "In Love", "bg-pink-500"),
    MoodOption(8, "😭", "Crying", "bg-blue-600"),
)

_OPTIONS_BY_LEVEL = {option.level: option for option in MOOD_OPTIONS}


def mood_option(level: int) -> MoodOption:
    # bool is an int subclass; True would otherwise select level 1
    option = None if isinstance(level, bool) else _OPTIONS_BY_LEVEL.get(level)
    if option is None:
        raise ValidationError(f"invalid mood level: {level!r}")
    return option


__all__ = ["MOOD_OPTIONS", "MoodOption", "mood_option"]
