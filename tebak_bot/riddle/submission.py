# tebak_bot/riddle/submission.py
"""
One answer, start to finish.

IDLE -> LOCAL_CHECK -> MATCHED ------------------------> RESOLVED
                    -> ESCALATE -> REMOTE_CHECK -------> RESOLVED

The local matcher is tried on the in-memory riddle, then once more on a
fresh copy from the store (synonyms may have been learned since the
in-memory copy was made). Only when both say nothing does the remote judge
run. A judge-confirmed answer is learned. Every verdict is logged as an
Attempt before the round resolves; a failed judge call records nothing and
drops the state back to IDLE so the player can retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Optional, Tuple

from tebak_bot.riddle.constants import STATUS_CLOSE, STATUS_CORRECT, STATUS_WRONG
from tebak_bot.riddle.errors import SubmissionBusy
from tebak_bot.riddle.learning import record_confirmed_synonym
from tebak_bot.riddle.models import (
    SOURCE_LOCAL,
    SOURCE_REMOTE,
    AnswerValidation,
    Attempt,
    Riddle,
)
from tebak_bot.riddle.profile import Summarizer, is_analysis_due, schedule_analysis
from tebak_bot.riddle.state import GameState, SubmissionPhase
from tebak_bot.riddle.validation import try_match_locally

logger = logging.getLogger(__name__)

Judge = Callable[[Riddle, str, str], Awaitable[AnswerValidation]]


@dataclass(frozen=True)
class SubmissionResult:
    riddle: Riddle
    validation: AnswerValidation
    status: str
    source: str
    attempt: Attempt
    points: int
    learned: bool = False


def status_of(validation: AnswerValidation) -> str:
    if validation.is_correct:
        return STATUS_CORRECT
    if validation.is_close:
        return STATUS_CLOSE
    return STATUS_WRONG


async def _local_check(state: GameState, store, user_answer: str) -> Tuple[Riddle, Optional[AnswerValidation]]:
    riddle = state.current_riddle
    verdict = try_match_locally(riddle, user_answer)
    if verdict is not None:
        return riddle, verdict

    fresh = await store.get_riddle(riddle.id)
    if fresh is None or fresh.accepted_answers == riddle.accepted_answers:
        return riddle, None

    state.current_riddle = fresh
    return fresh, try_match_locally(fresh, user_answer)


async def _record_attempt(
    state: GameState,
    store,
    riddle: Riddle,
    user_answer: str,
    validation: AnswerValidation,
    source: str,
    summarizer: Optional[Summarizer],
) -> Attempt:
    attempt = Attempt(
        riddle_id=riddle.id,
        player_id=state.player_id,
        user_answer=user_answer,
        is_correct=validation.is_correct,
        feedback=validation.feedback,
        source=source,
    )
    attempt_id = await store.save_attempt(attempt)
    attempt = replace(attempt, id=attempt_id)

    state.attempt_count += 1
    if summarizer is not None and is_analysis_due(state.attempt_count):
        schedule_analysis(state, store, summarizer)

    return attempt


async def submit_answer(
    state: GameState,
    user_answer: str,
    *,
    store,
    judge: Judge,
    summarizer: Optional[Summarizer] = None,
) -> SubmissionResult:
    """
    Judge one answer for the riddle in play.

    Raises SubmissionBusy if another answer is still being judged, and lets
    the judge's JudgeError through untouched. The riddle is pinned when the
    answer arrives, so the session ending mid-judgment doesn't lose the
    verdict.
    """
    if state.phase != SubmissionPhase.IDLE:
        raise SubmissionBusy(state.phase.value)
    if state.current_riddle is None:
        raise ValueError("no riddle in play")

    # Until the attempt is stored, any failure hands the riddle back
    try:
        state.phase = SubmissionPhase.LOCAL_CHECK
        riddle, validation = await _local_check(state, store, user_answer)

        if validation is not None:
            state.phase = SubmissionPhase.MATCHED
            source = SOURCE_LOCAL
        else:
            state.phase = SubmissionPhase.ESCALATE
            state.phase = SubmissionPhase.REMOTE_CHECK
            validation = await judge(riddle, user_answer, state.persona)
            source = SOURCE_REMOTE

        attempt = await _record_attempt(
            state, store, riddle, user_answer, validation, source, summarizer
        )
    except BaseException:
        state.phase = SubmissionPhase.IDLE
        raise

    learned = False
    if source == SOURCE_REMOTE and validation.is_correct:
        learned = await record_confirmed_synonym(store, riddle.id, user_answer)

    points = state.apply_result(validation.is_correct)
    state.phase = SubmissionPhase.RESOLVED

    logger.debug(
        "Resolved answer %r for riddle %s: %s via %s",
        user_answer,
        riddle.id,
        status_of(validation),
        source,
    )

    return SubmissionResult(
        riddle=riddle,
        validation=validation,
        status=status_of(validation),
        source=source,
        attempt=attempt,
        points=points,
        learned=learned,
    )
