# tebak_bot/llm/riddles.py

import logging
import random
from typing import List, Sequence

from tebak_bot.config import RIDDLE_LANGUAGE
from tebak_bot.llm.client import chat_json
from tebak_bot.riddle.errors import MalformedResponse, RiddleGenerationError, wrap_error
from tebak_bot.riddle.models import Riddle

logger = logging.getLogger(__name__)

# Only the tail of the history goes into the prompt
AVOID_CONTEXT_SIZE = 15

REQUIRED_FIELDS = ("question", "answer", "hint", "funFact")


def build_riddle_prompt(avoid_list: Sequence[str], persona: str = "") -> str:
    avoid: List[str] = list(avoid_list)[-AVOID_CONTEXT_SIZE:]
    avoid_context = (
        f"ALREADY ASKED (do not repeat these): {' || '.join(avoid)}.\n"
        if avoid
        else ""
    )
    persona_context = f"Player style: {persona}\n" if persona else ""

    return (
        f"Request ID: {random.randint(0, 9_999_999)}\n"
        "Category: mixed / general\n\n"
        f"Write ONE creative, funny riddle in {RIDDLE_LANGUAGE}. "
        "Wordplay, simple logic or general knowledge are all fine.\n"
        f"{avoid_context}{persona_context}\n"
        'Output JSON: {"question": "...", "answer": "1-3 words", '
        '"hint": "a helpful hint", "funFact": "a short fact about the answer"}\n'
        "The answer MUST be specific (1-3 words)."
    )


def _parse_riddle(data: dict) -> Riddle:
    missing = [k for k in REQUIRED_FIELDS if not isinstance(data.get(k), str)]
    if missing or not data["answer"].strip():
        raise MalformedResponse(f"riddle missing fields {missing}")

    return Riddle.new(
        question=data["question"].strip(),
        answer=data["answer"].strip(),
        hint=data["hint"].strip(),
        fun_fact=data["funFact"].strip(),
    )


async def generate_riddle(avoid_list: Sequence[str] = (), persona: str = "") -> Riddle:
    try:
        data = await chat_json(
            build_riddle_prompt(avoid_list, persona),
            temperature=0.8,
            max_tokens=1000,
        )
        riddle = _parse_riddle(data)
    except RiddleGenerationError:
        raise
    except Exception as e:
        err = wrap_error(e, RiddleGenerationError)
        logger.warning("Riddle generation failed (%s): %r", err.kind.value, e)
        raise err from e

    logger.debug("Generated riddle id=%s", riddle.id)
    return riddle
