# tebak_bot/riddle/models.py

import time
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

SOURCE_LOCAL = "local"
SOURCE_REMOTE = "remote"


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Riddle:
    id: str
    question: str
    answer: str
    hint: str = ""
    fun_fact: str = ""
    accepted_answers: List[str] = field(default_factory=list)
    created_at: int = field(default_factory=now_ms)

    @classmethod
    def new(cls, question: str, answer: str, hint: str = "", fun_fact: str = "") -> "Riddle":
        return cls(
            id=str(uuid.uuid4()),
            question=question,
            answer=answer,
            hint=hint,
            fun_fact=fun_fact,
        )

    def with_accepted_answers(self, accepted: List[str]) -> "Riddle":
        return replace(self, accepted_answers=list(accepted))

    def summary(self) -> str:
        """History line used to steer generation away from repeats."""
        return f"{self.question} ({self.answer})"


@dataclass(frozen=True)
class Attempt:
    riddle_id: str
    player_id: int
    user_answer: str
    is_correct: bool
    feedback: str
    source: str = SOURCE_LOCAL
    timestamp: int = field(default_factory=now_ms)
    id: Optional[int] = None


@dataclass(frozen=True)
class AnswerValidation:
    is_correct: bool
    is_close: bool
    feedback: str


@dataclass
class PlayerProfile:
    persona: str = ""
    high_score: int = 0
    last_updated: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "persona": self.persona,
            "high_score": self.high_score,
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> "PlayerProfile":
        if not isinstance(raw, dict):
            return cls()
        persona = raw.get("persona")
        high_score = raw.get("high_score")
        last_updated = raw.get("last_updated")
        return cls(
            persona=persona if isinstance(persona, str) else "",
            high_score=high_score if isinstance(high_score, int) else 0,
            last_updated=last_updated if isinstance(last_updated, int) else 0,
        )
