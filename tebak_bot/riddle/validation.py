# tebak_bot/riddle/validation.py
"""
Local answer matching.

Checks run cheapest first and the first hit wins:
  1. exact (normalized) match on the canonical answer
  2. exact match on any learned synonym
  3. typo match on the canonical answer
  4. typo match on any learned synonym

No hit means no verdict (None), never a rejection: only the remote
judge is allowed to say an answer is wrong.
"""

from typing import Optional

from tebak_bot.riddle.models import AnswerValidation, Riddle
from tebak_bot.utils.fuzzy import is_typo_equivalent, normalize

FEEDBACK_EXACT = "Spot on! That's exactly it."
FEEDBACK_SYNONYM = "Correct! That works too."
FEEDBACK_TYPO = "Correct! (I'll let that little typo slide.)"
FEEDBACK_SYNONYM_TYPO = "Correct! Close enough to an answer I know, typo forgiven."


def try_match_locally(riddle: Riddle, user_answer: str) -> Optional[AnswerValidation]:
    user = normalize(user_answer)
    if not user:
        return None

    canonical = normalize(riddle.answer)
    accepted = [normalize(a) for a in riddle.accepted_answers]

    if user == canonical:
        return AnswerValidation(is_correct=True, is_close=False, feedback=FEEDBACK_EXACT)

    if user in accepted:
        return AnswerValidation(is_correct=True, is_close=False, feedback=FEEDBACK_SYNONYM)

    if is_typo_equivalent(user, canonical):
        return AnswerValidation(is_correct=True, is_close=False, feedback=FEEDBACK_TYPO)

    if any(is_typo_equivalent(user, a) for a in accepted if a):
        return AnswerValidation(is_correct=True, is_close=False, feedback=FEEDBACK_SYNONYM_TYPO)

    return None
