"""Tests for synonym learning."""

import unittest
from unittest import mock

import asyncpg

from tebak_bot.riddle.learning import merge_synonym, record_confirmed_synonym
from tebak_bot.riddle.models import Riddle
from tests.fakes import FakeStore


class MergeSynonymTests(unittest.TestCase):
    def test_appends_raw_text(self) -> None:
        self.assertEqual(merge_synonym("Uang", ["uang kertas"], "Duit!"), ["uang kertas", "Duit!"])

    def test_skips_normalized_duplicates(self) -> None:
        self.assertIsNone(merge_synonym("Uang", ["duit"], "DUIT."))

    def test_skips_canonical_and_blank(self) -> None:
        self.assertIsNone(merge_synonym("Uang", [], "uang"))
        self.assertIsNone(merge_synonym("Uang", [], " ... "))


class RecordConfirmedSynonymTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.riddle = Riddle(id="r-uang", question="?", answer="Uang", accepted_answers=["uang"])
        self.store = FakeStore([self.riddle])

    async def test_learning_is_monotonic_and_deduplicating(self) -> None:
        self.assertTrue(await record_confirmed_synonym(self.store, "r-uang", "duit"))
        stored = self.store.riddles["r-uang"].accepted_answers
        self.assertEqual(stored, ["uang", "duit"])

        self.assertFalse(await record_confirmed_synonym(self.store, "r-uang", "duit"))
        self.assertEqual(len(self.store.riddles["r-uang"].accepted_answers), 2)

    async def test_missing_riddle_is_a_silent_noop(self) -> None:
        self.assertFalse(await record_confirmed_synonym(self.store, "gone", "duit"))
        self.assertNotIn("gone", self.store.riddles)

    async def test_storage_failure_does_not_escape(self) -> None:
        store = mock.Mock()
        store.update_riddle_synonyms = mock.AsyncMock(side_effect=ConnectionRefusedError("db down"))
        with self.assertLogs("tebak_bot.riddle.learning", level="ERROR"):
            learned = await record_confirmed_synonym(store, "r-uang", "duit")
        self.assertFalse(learned)

    async def test_closing_pool_does_not_escape(self) -> None:
        store = mock.Mock()
        store.update_riddle_synonyms = mock.AsyncMock(
            side_effect=asyncpg.InterfaceError("pool is closing")
        )
        with self.assertLogs("tebak_bot.riddle.learning", level="ERROR"):
            learned = await record_confirmed_synonym(store, "r-uang", "duit")
        self.assertFalse(learned)


if __name__ == "__main__":
    unittest.main()
