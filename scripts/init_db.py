# scripts/init_db.py

import asyncio
import logging

from tebak_bot.db import close_pool, init_schema


async def main():
    logging.basicConfig(level=logging.INFO)
    try:
        await init_schema()
    finally:
        await close_pool()

if __name__ == "__main__":
    asyncio.run(main())
