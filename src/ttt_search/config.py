"""Difficulty levels and their search depths.

Environment-first: each value can be overridden with a TTT_* variable, the
defaults apply otherwise. The engine only ever sees the resulting integer.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class Difficulty(Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def parse(cls, raw: str) -> "Difficulty":
        for d in cls:
            if raw.strip().lower() in (d.value.lower(), d.name.lower()):
                return d
        raise ValueError(f"Unknown difficulty: {raw!r} (expected one of Easy, Medium, Hard)")


DEFAULT_DEPTHS = {
    Difficulty.EASY: 2,
    Difficulty.MEDIUM: 3,
    Difficulty.HARD: 4,
}
DEFAULT_BOT_DELAY_MS = 600


@dataclass
class Settings:
    depths: Dict[Difficulty, int] = field(default_factory=lambda: dict(DEFAULT_DEPTHS))
    default_difficulty: Difficulty = Difficulty.MEDIUM
    bot_delay_ms: int = DEFAULT_BOT_DELAY_MS


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


def load_settings() -> Settings:
    depths = {
        d: _env_int(f"TTT_DEPTH_{d.name}", default)
        for d, default in DEFAULT_DEPTHS.items()
    }
    raw_default = os.getenv("TTT_DIFFICULTY")
    default_difficulty = Difficulty.parse(raw_default) if raw_default else Difficulty.MEDIUM
    return Settings(
        depths=depths,
        default_difficulty=default_difficulty,
        bot_delay_ms=_env_int("TTT_BOT_DELAY_MS", DEFAULT_BOT_DELAY_MS),
    )


def depth_for(difficulty: Difficulty | str, settings: Optional[Settings] = None) -> int:
    if isinstance(difficulty, str):
        difficulty = Difficulty.parse(difficulty)
    cfg = settings if settings is not None else load_settings()
    return cfg.depths[difficulty]
