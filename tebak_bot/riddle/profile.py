# tebak_bot/riddle/profile.py
"""
Background player-style analysis.

Every ANALYSIS_EVERY recorded attempts a summary of the player's recent
answers is refreshed and stored. It runs as a detached task and is purely
advisory: failures are logged and dropped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence

from tebak_bot.riddle.constants import ANALYSIS_EVERY, ANALYSIS_WINDOW
from tebak_bot.riddle.models import Attempt
from tebak_bot.riddle.state import GameState

logger = logging.getLogger(__name__)

Summarizer = Callable[[Sequence[Attempt]], Awaitable[str]]


def is_analysis_due(attempt_count: int) -> bool:
    return attempt_count > 0 and attempt_count % ANALYSIS_EVERY == 0


async def run_analysis(state: GameState, store, summarizer: Summarizer) -> None:
    if state.analyzing:
        return

    state.analyzing = True
    try:
        attempts = await store.get_recent_attempts(ANALYSIS_WINDOW, player_id=state.player_id)
        persona = await summarizer(attempts)
        if not persona:
            return

        state.persona = persona
        profile = await store.get_user_profile(state.profile_key)
        profile.persona = persona
        await store.save_user_profile(state.profile_key, profile)
        logger.info("Updated persona for player %s: %s", state.player_id, persona)
    except Exception:
        logger.exception("Persona analysis failed for player %s", state.player_id)
    finally:
        state.analyzing = False


def schedule_analysis(state: GameState, store, summarizer: Summarizer) -> Optional[asyncio.Task]:
    """Fire-and-forget; the task handle is kept on the state so it isn't GC'd."""
    if state.analyzing:
        return None
    state.analysis_task = asyncio.create_task(run_analysis(state, store, summarizer))
    return state.analysis_task
