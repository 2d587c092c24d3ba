# tebak_bot/riddle/state.py

import asyncio
import enum
from dataclasses import dataclass, field
from typing import List, Optional

from tebak_bot.riddle.constants import BASE_POINTS, HISTORY_LIMIT, STREAK_BONUS
from tebak_bot.riddle.models import Riddle


class SubmissionPhase(enum.Enum):
    IDLE = "idle"
    LOCAL_CHECK = "local_check"
    MATCHED = "matched"
    ESCALATE = "escalate"
    REMOTE_CHECK = "remote_check"
    RESOLVED = "resolved"


@dataclass
class GameState:
    player_id: int
    current_riddle: Optional[Riddle] = None
    phase: SubmissionPhase = SubmissionPhase.IDLE
    in_progress: bool = True

    score: int = 0
    streak: int = 0
    high_score: int = 0

    persona: str = ""
    history: List[str] = field(default_factory=list)
    attempt_count: int = 0
    analyzing: bool = False

    # At most one riddle generated ahead of time
    preload: Optional[asyncio.Task] = None
    analysis_task: Optional[asyncio.Task] = None

    @classmethod
    def new(cls, player_id: int) -> "GameState":
        return cls(player_id=player_id)

    @property
    def profile_key(self) -> str:
        return str(self.player_id)

    @property
    def accepting_answers(self) -> bool:
        return (
            self.in_progress
            and self.current_riddle is not None
            and self.phase == SubmissionPhase.IDLE
        )

    def push_history(self, riddle: Riddle) -> None:
        self.history.append(riddle.summary())
        if len(self.history) > HISTORY_LIMIT:
            del self.history[: len(self.history) - HISTORY_LIMIT]

    def reset_round(self, riddle: Riddle) -> None:
        self.current_riddle = riddle
        self.phase = SubmissionPhase.IDLE

    def apply_result(self, is_correct: bool) -> int:
        """Update score/streak and return the points earned."""
        if not is_correct:
            self.streak = 0
            return 0

        points = BASE_POINTS + self.streak * STREAK_BONUS
        self.score += points
        self.streak += 1
        if self.score > self.high_score:
            self.high_score = self.score
        return points

    def take_preload(self) -> Optional[asyncio.Task]:
        task, self.preload = self.preload, None
        return task

    def cancel_preload(self) -> None:
        task = self.take_preload()
        if task is not None and not task.done():
            task.cancel()
