"""Tests for the OpenAI-backed judge, riddle generator and persona summarizer."""

import unittest
from unittest import mock

import httpx
import openai

from tebak_bot.llm.client import clean_json, parse_json_object
from tebak_bot.llm.judge import check_answer
from tebak_bot.llm.persona import analyze_user_pattern
from tebak_bot.llm.riddles import build_riddle_prompt, generate_riddle
from tebak_bot.riddle.errors import (
    JudgeError,
    JudgeErrorKind,
    MalformedResponse,
    RiddleGenerationError,
    classify_error,
)
from tebak_bot.riddle.models import Attempt, Riddle

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def status_error(cls, code):
    return cls("boom", response=httpx.Response(code, request=REQUEST), body=None)


RIDDLE = Riddle(id="r-1", question="Makin diisi makin terbang?", answer="Balon")


class CleanJsonTests(unittest.TestCase):
    def test_strips_code_fences_and_chatter(self) -> None:
        text = 'Sure!\n```json\n{"isCorrect": true}\n```\nHope that helps'
        self.assertEqual(clean_json(text), '{"isCorrect": true}')

    def test_parse_rejects_non_objects(self) -> None:
        with self.assertRaises(MalformedResponse):
            parse_json_object("no json here")

    def test_parse_returns_dict(self) -> None:
        self.assertEqual(parse_json_object('```{"a": 1}```'), {"a": 1})


class ClassifyErrorTests(unittest.TestCase):
    def test_status_errors(self) -> None:
        self.assertEqual(classify_error(status_error(openai.NotFoundError, 404)), JudgeErrorKind.NOT_FOUND)
        self.assertEqual(
            classify_error(status_error(openai.AuthenticationError, 401)), JudgeErrorKind.UNAUTHORIZED
        )
        self.assertEqual(
            classify_error(status_error(openai.RateLimitError, 429)), JudgeErrorKind.RATE_LIMITED
        )

    def test_network_and_format_errors(self) -> None:
        self.assertEqual(classify_error(openai.APIConnectionError(request=REQUEST)), JudgeErrorKind.NETWORK)
        self.assertEqual(classify_error(MalformedResponse("bad")), JudgeErrorKind.MALFORMED)
        self.assertEqual(classify_error(RuntimeError("??")), JudgeErrorKind.UNKNOWN)

    def test_every_kind_has_a_message(self) -> None:
        for kind in JudgeErrorKind:
            self.assertTrue(JudgeError(kind).user_message)


class CheckAnswerTests(unittest.IsolatedAsyncioTestCase):
    async def test_parses_verdict(self) -> None:
        reply = {"isCorrect": True, "isClose": False, "feedback": "Mantap!"}
        with mock.patch("tebak_bot.llm.judge.chat_json", mock.AsyncMock(return_value=reply)) as chat:
            result = await check_answer(RIDDLE, "gas terbang", "suka singkatan")

        self.assertTrue(result.is_correct)
        self.assertFalse(result.is_close)
        self.assertEqual(result.feedback, "Mantap!")
        prompt = chat.await_args.args[0]
        self.assertIn("gas terbang", prompt)
        self.assertIn("suka singkatan", prompt)

    async def test_close_is_ignored_for_correct_answers(self) -> None:
        reply = {"isCorrect": True, "isClose": True, "feedback": ""}
        with mock.patch("tebak_bot.llm.judge.chat_json", mock.AsyncMock(return_value=reply)):
            result = await check_answer(RIDDLE, "balon udara")
        self.assertFalse(result.is_close)

    async def test_bad_fields_are_malformed(self) -> None:
        reply = {"isCorrect": "yes", "feedback": "?"}
        with mock.patch("tebak_bot.llm.judge.chat_json", mock.AsyncMock(return_value=reply)):
            with self.assertRaises(JudgeError) as ctx:
                await check_answer(RIDDLE, "balon")
        self.assertEqual(ctx.exception.kind, JudgeErrorKind.MALFORMED)

    async def test_sdk_errors_are_classified(self) -> None:
        error = status_error(openai.RateLimitError, 429)
        with mock.patch("tebak_bot.llm.judge.chat_json", mock.AsyncMock(side_effect=error)):
            with self.assertRaises(JudgeError) as ctx:
                await check_answer(RIDDLE, "balon")
        self.assertEqual(ctx.exception.kind, JudgeErrorKind.RATE_LIMITED)
        self.assertIs(ctx.exception.__cause__, error)


class GenerateRiddleTests(unittest.IsolatedAsyncioTestCase):
    async def test_builds_fresh_riddle(self) -> None:
        reply = {
            "question": " Makin diisi makin terbang? ",
            "answer": "Balon ",
            "hint": "Ada di pesta ulang tahun",
            "funFact": "Dulu dibuat dari usus hewan.",
        }
        with mock.patch("tebak_bot.llm.riddles.chat_json", mock.AsyncMock(return_value=reply)):
            riddle = await generate_riddle(["Soal lama (jawaban)"])

        self.assertTrue(riddle.id)
        self.assertEqual(riddle.question, "Makin diisi makin terbang?")
        self.assertEqual(riddle.answer, "Balon")
        self.assertEqual(riddle.fun_fact, "Dulu dibuat dari usus hewan.")
        self.assertEqual(riddle.accepted_answers, [])

    async def test_missing_fields_raise_generation_error(self) -> None:
        with mock.patch("tebak_bot.llm.riddles.chat_json", mock.AsyncMock(return_value={"question": "?"})):
            with self.assertRaises(RiddleGenerationError) as ctx:
                await generate_riddle()
        self.assertEqual(ctx.exception.kind, JudgeErrorKind.MALFORMED)

    async def test_auth_failure(self) -> None:
        error = status_error(openai.AuthenticationError, 401)
        with mock.patch("tebak_bot.llm.riddles.chat_json", mock.AsyncMock(side_effect=error)):
            with self.assertRaises(RiddleGenerationError) as ctx:
                await generate_riddle()
        self.assertEqual(ctx.exception.kind, JudgeErrorKind.UNAUTHORIZED)

    def test_prompt_only_mentions_recent_history(self) -> None:
        history = [f"riddle-{i:02d}" for i in range(20)]
        prompt = build_riddle_prompt(history)
        self.assertNotIn("riddle-04", prompt)
        self.assertIn("riddle-05", prompt)
        self.assertIn("riddle-19", prompt)


class AnalyzeUserPatternTests(unittest.IsolatedAsyncioTestCase):
    def attempts(self, n):
        return [
            Attempt(riddle_id="r", player_id=1, user_answer=f"a{i}", is_correct=True, feedback="")
            for i in range(n)
        ]

    async def test_too_few_attempts(self) -> None:
        with mock.patch("tebak_bot.llm.persona.chat_text", mock.AsyncMock()) as chat:
            self.assertEqual(await analyze_user_pattern(self.attempts(2)), "")
        chat.assert_not_awaited()

    async def test_summary_is_returned(self) -> None:
        with mock.patch("tebak_bot.llm.persona.chat_text", mock.AsyncMock(return_value="Suka singkatan")):
            self.assertEqual(await analyze_user_pattern(self.attempts(3)), "Suka singkatan")


if __name__ == "__main__":
    unittest.main()
