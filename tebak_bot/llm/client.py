# tebak_bot/llm/client.py

import json
import logging
from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from tebak_bot.config import OPENAI_API_KEY, OPENAI_MODEL
from tebak_bot.riddle.errors import MalformedResponse

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You act as a REST API server that only ever answers with raw JSON. "
    "Output exactly ONE valid JSON object. "
    "No intro text, no closing text, no Markdown code fences."
)

_client: Optional[AsyncOpenAI] = None


def get_client() -> AsyncOpenAI:
    global _client
    if _client is None:
        _client = AsyncOpenAI(api_key=OPENAI_API_KEY)
    return _client


def clean_json(text: str) -> str:
    """Strip code fences and anything outside the outermost braces."""
    if not text:
        return ""

    cleaned = text.replace("```json", "").replace("```JSON", "").replace("```", "")

    first = cleaned.find("{")
    last = cleaned.rfind("}")
    if first != -1 and last > first:
        return cleaned[first:last + 1]

    return cleaned.strip()


def parse_json_object(text: str) -> Dict[str, Any]:
    cleaned = clean_json(text)
    if not cleaned.startswith("{"):
        logger.error("Invalid JSON content: %r", text)
        raise MalformedResponse("response is not a JSON object")

    data = json.loads(cleaned)
    if not isinstance(data, dict):
        raise MalformedResponse("response is not a JSON object")
    return data


async def chat_json(
    prompt: str,
    *,
    temperature: float,
    max_tokens: int,
) -> Dict[str, Any]:
    """One JSON-mode completion, parsed. SDK errors propagate unchanged."""
    response = await get_client().chat.completions.create(
        model=OPENAI_MODEL,
        messages=[
            {"role": "system", "content": SYSTEM_INSTRUCTION},
            {"role": "user", "content": prompt},
        ],
        temperature=temperature,
        max_tokens=max_tokens,
        response_format={"type": "json_object"},
    )

    text = response.choices[0].message.content
    if not text:
        raise MalformedResponse("empty response from AI")

    return parse_json_object(text)


async def chat_text(prompt: str, *, temperature: float, max_tokens: int) -> str:
    response = await get_client().chat.completions.create(
        model=OPENAI_MODEL,
        messages=[{"role": "user", "content": prompt}],
        temperature=temperature,
        max_tokens=max_tokens,
    )
    return (response.choices[0].message.content or "").strip()
