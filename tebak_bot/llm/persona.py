# tebak_bot/llm/persona.py

from typing import Sequence

from tebak_bot.llm.client import chat_text
from tebak_bot.riddle.models import Attempt

MIN_ATTEMPTS_FOR_PERSONA = 3
MAX_PERSONA_LENGTH = 200


def build_persona_prompt(attempts: Sequence[Attempt]) -> str:
    lines = [
        f'- answered "{a.user_answer}" ({"correct" if a.is_correct else "wrong"})'
        for a in attempts
    ]
    return (
        "Here are a riddle player's recent answers, newest first:\n"
        + "\n".join(lines)
        + "\n\nDescribe the player's answering style in ONE short sentence "
        "(e.g. 'uses abbreviations', 'very literal', 'loves slang'). "
        "Do not judge their skill."
    )


async def analyze_user_pattern(attempts: Sequence[Attempt]) -> str:
    """
    Summarize how a player tends to answer. Too little data gives "".
    Errors propagate; the caller decides whether they matter.
    """
    if len(attempts) < MIN_ATTEMPTS_FOR_PERSONA:
        return ""

    text = await chat_text(
        build_persona_prompt(attempts),
        temperature=0.4,
        max_tokens=80,
    )
    return text[:MAX_PERSONA_LENGTH]
