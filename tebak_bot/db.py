# tebak_bot/db.py
"""
Postgres persistence for riddles, attempts and player profiles.

Every public coroutine here is part of the store contract the game
logic is written against (get/put riddle, atomic synonym update,
attempt log with newest-first query, profile get/put).
"""

import json
import logging
from typing import Any, List, Optional

import asyncpg

from .config import DB_USER, DB_PASS, DB_NAME, DB_HOST, DB_PORT, DB_ENABLE_SSL
from .riddle.learning import merge_synonym
from .riddle.models import Attempt, PlayerProfile, Riddle, now_ms

logger = logging.getLogger(__name__)

_pool: Optional[asyncpg.Pool] = None


async def get_pool() -> asyncpg.Pool:
    global _pool
    if _pool is not None:
        return _pool

    if not DB_PASS or not DB_NAME:
        raise ValueError("DB_PASS or DB_NAME missing in environment")

    _pool = await asyncpg.create_pool(
        user=DB_USER,
        password=DB_PASS,
        database=DB_NAME,
        host=DB_HOST,
        port=DB_PORT,
        ssl=DB_ENABLE_SSL,
    )
    logger.info("✅ Database pool created")
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


async def init_schema() -> None:
    pool = await get_pool()
    async with pool.acquire() as conn:
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS riddles
            (
                id               TEXT PRIMARY KEY,
                question         TEXT   NOT NULL,
                answer           TEXT   NOT NULL,
                hint             TEXT   NOT NULL DEFAULT '',
                fun_fact         TEXT   NOT NULL DEFAULT '',
                accepted_answers JSON,
                created_at       BIGINT NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_riddles_created_at
                ON riddles (created_at DESC);
            """
        )

        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS attempts
            (
                id          BIGSERIAL PRIMARY KEY,
                riddle_id   TEXT    NOT NULL,
                player_id   BIGINT  NOT NULL,
                user_answer TEXT    NOT NULL,
                is_correct  BOOLEAN NOT NULL,
                feedback    TEXT    NOT NULL DEFAULT '',
                source      TEXT    NOT NULL DEFAULT 'local',
                timestamp   BIGINT  NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_attempts_riddle
                ON attempts (riddle_id);
            CREATE INDEX IF NOT EXISTS idx_attempts_player_id_desc
                ON attempts (player_id, id DESC);
            """
        )

        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS user_profiles
            (
                key          TEXT PRIMARY KEY,
                data         JSON,
                last_updated TIMESTAMPTZ NOT NULL DEFAULT NOW()
            );
            """
        )

    logger.info("✅ Schema created / already existed")


# -----------------------------
# Helpers
# -----------------------------

def _parse_answers(raw: Any) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, list):
        return [str(x) for x in raw]
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Corrupt accepted_answers %r, ignoring", raw)
            return []
        if isinstance(parsed, list):
            return [str(x) for x in parsed]
        return []
    return []


def _row_to_riddle(row) -> Riddle:
    return Riddle(
        id=row["id"],
        question=row["question"],
        answer=row["answer"],
        hint=row["hint"] or "",
        fun_fact=row["fun_fact"] or "",
        accepted_answers=_parse_answers(row["accepted_answers"]),
        created_at=row["created_at"],
    )


def _row_to_attempt(row) -> Attempt:
    return Attempt(
        id=row["id"],
        riddle_id=row["riddle_id"],
        player_id=row["player_id"],
        user_answer=row["user_answer"],
        is_correct=row["is_correct"],
        feedback=row["feedback"],
        source=row["source"],
        timestamp=row["timestamp"],
    )


# -----------------------------
# Riddles
# -----------------------------

async def save_riddle(riddle: Riddle) -> None:
    pool = await get_pool()
    async with pool.acquire() as conn:
        await conn.execute(
            """
            INSERT INTO riddles (id, question, answer, hint, fun_fact,
                                 accepted_answers, created_at)
            VALUES ($1, $2, $3, $4, $5, $6, $7) ON CONFLICT (id) DO NOTHING;
            """,
            riddle.id,
            riddle.question,
            riddle.answer,
            riddle.hint,
            riddle.fun_fact,
            json.dumps(riddle.accepted_answers),
            riddle.created_at,
        )


async def get_riddle(riddle_id: str) -> Optional[Riddle]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            """
            SELECT id, question, answer, hint, fun_fact, accepted_answers, created_at
            FROM riddles
            WHERE id = $1;
            """,
            riddle_id,
        )

    if row is None:
        return None
    return _row_to_riddle(row)


async def update_riddle_synonyms(riddle_id: str, new_answer: str) -> Optional[List[str]]:
    """
    Append `new_answer` to a riddle's accepted answers.

    The row is locked for the read-modify-write so two confirmations for
    the same riddle can't drop each other. Returns the new list, or None if
    the riddle is gone or nothing changed.
    """
    pool = await get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            row = await conn.fetchrow(
                """
                SELECT answer, accepted_answers
                FROM riddles
                WHERE id = $1
                FOR UPDATE
                """,
                riddle_id,
            )

            if row is None:
                logger.debug("Riddle %s not found, skipping synonym update", riddle_id)
                return None

            merged = merge_synonym(
                row["answer"],
                _parse_answers(row["accepted_answers"]),
                new_answer,
            )
            if merged is None:
                return None

            await conn.execute(
                """
                UPDATE riddles
                SET accepted_answers = $2
                WHERE id = $1
                """,
                riddle_id,
                json.dumps(merged),
            )

    return merged


async def get_recent_riddle_summaries(limit: int = 50) -> List[str]:
    """Oldest first, so the list reads like the session history."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            """
            SELECT question, answer
            FROM riddles
            ORDER BY created_at DESC
                LIMIT $1;
            """,
            limit,
        )
    return [f"{r['question']} ({r['answer']})" for r in reversed(rows)]


# -----------------------------
# Attempts
# -----------------------------

async def save_attempt(attempt: Attempt) -> int:
    pool = await get_pool()
    async with pool.acquire() as conn:
        attempt_id = await conn.fetchval(
            """
            INSERT INTO attempts (riddle_id, player_id, user_answer, is_correct,
                                  feedback, source, timestamp)
            VALUES ($1, $2, $3, $4, $5, $6, $7) RETURNING id;
            """,
            attempt.riddle_id,
            attempt.player_id,
            attempt.user_answer,
            attempt.is_correct,
            attempt.feedback,
            attempt.source,
            attempt.timestamp,
        )
    return attempt_id


async def get_attempt_count(player_id: Optional[int] = None) -> int:
    pool = await get_pool()
    async with pool.acquire() as conn:
        return await conn.fetchval(
            """
            SELECT COUNT(*)
            FROM attempts
            WHERE $1::bigint IS NULL OR player_id = $1;
            """,
            player_id,
        )


async def get_recent_attempts(limit: int = 20, player_id: Optional[int] = None) -> List[Attempt]:
    """Newest first."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            """
            SELECT id, riddle_id, player_id, user_answer, is_correct,
                   feedback, source, timestamp
            FROM attempts
            WHERE $2::bigint IS NULL OR player_id = $2
            ORDER BY id DESC
                LIMIT $1;
            """,
            limit,
            player_id,
        )
    return [_row_to_attempt(r) for r in rows]


# -----------------------------
# Player profiles
# -----------------------------

async def save_user_profile(key: str, profile: PlayerProfile) -> None:
    profile.last_updated = now_ms()
    pool = await get_pool()
    async with pool.acquire() as conn:
        await conn.execute(
            """
            INSERT INTO user_profiles (key, data, last_updated)
            VALUES ($1, $2, NOW()) ON CONFLICT (key)
            DO
            UPDATE SET
                data = EXCLUDED.data,
                last_updated = NOW();
            """,
            key,
            json.dumps(profile.to_dict()),
        )


async def get_user_profile(key: str) -> PlayerProfile:
    """Unknown or unreadable profiles come back as the empty default."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        raw = await conn.fetchval(
            "SELECT data FROM user_profiles WHERE key = $1;",
            key,
        )

    if raw is None:
        return PlayerProfile()
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Corrupt profile for %s, starting fresh", key)
            return PlayerProfile()
    return PlayerProfile.from_dict(raw)
