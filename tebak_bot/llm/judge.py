# tebak_bot/llm/judge.py

import logging

from tebak_bot.llm.client import chat_json
from tebak_bot.riddle.errors import JudgeError, MalformedResponse, wrap_error
from tebak_bot.riddle.models import AnswerValidation, Riddle

logger = logging.getLogger(__name__)


def build_judge_prompt(riddle: Riddle, user_answer: str, persona: str = "") -> str:
    persona_context = (
        f"Player style (context only, never a reason to accept): {persona}\n"
        if persona
        else ""
    )
    return (
        "Riddle context:\n"
        f'Q: "{riddle.question}"\n'
        f'A (key): "{riddle.answer}"\n'
        f"{persona_context}\n"
        f'Player answer: "{user_answer}"\n\n'
        "Task: judge the player's answer.\n"
        "1. isCorrect=true if it is the same answer, a synonym, or has a small typo.\n"
        "2. isCorrect=false and isClose=true if the idea is right but the word is off "
        "or too general (e.g. 'vehicle' for 'car').\n"
        "3. isCorrect=false and isClose=false if it is simply wrong.\n\n"
        'Output JSON: {"isCorrect": boolean, "isClose": boolean, '
        '"feedback": "short, fun, encouraging comment"}'
    )


def _parse_validation(data: dict) -> AnswerValidation:
    is_correct = data.get("isCorrect")
    is_close = data.get("isClose", False)
    if not isinstance(is_correct, bool) or not isinstance(is_close, bool):
        raise MalformedResponse(f"bad verdict fields: {data!r}")

    feedback = data.get("feedback")
    return AnswerValidation(
        is_correct=is_correct,
        # "close" only means something for a wrong answer
        is_close=is_close and not is_correct,
        feedback=feedback if isinstance(feedback, str) else "",
    )


async def check_answer(riddle: Riddle, user_answer: str, persona: str = "") -> AnswerValidation:
    """
    Ask the model for a verdict. Any failure is raised as a classified
    JudgeError; there is no fallback verdict.
    """
    try:
        data = await chat_json(
            build_judge_prompt(riddle, user_answer, persona),
            temperature=0.5,
            max_tokens=500,
        )
        return _parse_validation(data)
    except JudgeError:
        raise
    except Exception as e:
        err = wrap_error(e)
        logger.warning("Answer check failed (%s): %r", err.kind.value, e)
        raise err from e
