# tebak_bot/riddle/learning.py
"""
Synonym learning.

When the remote judge accepts an answer the local matcher missed, the raw
answer is appended to the riddle's accepted answers so the next identical
(or typo-close) answer is caught locally. Learning is best-effort: a
missing riddle or a storage hiccup never blocks the game.
"""

import logging
from typing import List, Optional

from tebak_bot.utils.fuzzy import normalize

logger = logging.getLogger(__name__)


def merge_synonym(answer: str, accepted: List[str], new_answer: str) -> Optional[List[str]]:
    """
    Return the accepted list with `new_answer` appended, or None when it adds
    nothing (blank, the canonical answer, or an existing entry after
    normalization).
    """
    key = normalize(new_answer)
    if not key or key == normalize(answer):
        return None
    if any(normalize(a) == key for a in accepted):
        return None
    return [*accepted, new_answer]


async def record_confirmed_synonym(store, riddle_id: str, new_answer: str) -> bool:
    """
    Persist a judge-confirmed phrasing for a riddle.

    `store` follows the tebak_bot.db contract; its update_riddle_synonyms
    does the read-modify-write atomically per riddle id. Returns True if a
    new entry was stored.
    """
    try:
        updated = await store.update_riddle_synonyms(riddle_id, new_answer)
    except Exception:
        logger.exception("Could not store synonym for riddle %s", riddle_id)
        return False

    if updated is None:
        logger.debug("Nothing learned for riddle %s", riddle_id)
        return False

    logger.info("Learned synonym %r for riddle %s", new_answer, riddle_id)
    return True
