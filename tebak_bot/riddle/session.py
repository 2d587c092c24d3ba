# tebak_bot/riddle/session.py

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Sequence

from tebak_bot.riddle.constants import HISTORY_LIMIT
from tebak_bot.riddle.models import Riddle
from tebak_bot.riddle.state import GameState

logger = logging.getLogger(__name__)

Generator = Callable[[Sequence[str], str], Awaitable[Riddle]]


async def start_session(state: GameState, store) -> None:
    """Restore what the player left behind: persona, high score, history."""
    profile = await store.get_user_profile(state.profile_key)
    state.persona = profile.persona
    state.high_score = profile.high_score

    if not state.history:
        state.history = list(await store.get_recent_riddle_summaries(HISTORY_LIMIT))


def preload_next(state: GameState, generator: Generator) -> asyncio.Task:
    state.cancel_preload()
    state.preload = asyncio.create_task(generator(list(state.history), state.persona))
    return state.preload


async def load_next_riddle(state: GameState, store, generator: Generator) -> Riddle:
    """
    Put the next riddle in play.

    Uses the preloaded riddle when there is one; a failed preload falls back
    to generating on the spot. Generation errors from that fallback propagate.
    """
    riddle = None
    task = state.take_preload()

    if task is not None and not task.cancelled():
        try:
            riddle = await task
        except Exception as e:
            logger.warning("Prefetch failed: %r", e)

    if riddle is None:
        riddle = await generator(list(state.history), state.persona)

    await store.save_riddle(riddle)

    state.reset_round(riddle)
    state.push_history(riddle)
    logger.info("Riddle %s in play for player %s", riddle.id, state.player_id)

    preload_next(state, generator)
    return riddle


def close_session(state: GameState) -> None:
    state.in_progress = False
    state.current_riddle = None
    state.cancel_preload()


async def end_session(state: GameState, store) -> None:
    close_session(state)

    profile = await store.get_user_profile(state.profile_key)
    if state.high_score > profile.high_score:
        profile.high_score = state.high_score
        await store.save_user_profile(state.profile_key, profile)
