#!/usr/bin/env python3
"""Sweep expired chat data. Meant to run from cron."""

import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.database import async_session_maker
from app.services.matching_service import purge_stale_waiting_entries
from app.services.message_service import purge_expired_messages
from app.services.signal_service import purge_expired_signals
from app.services.voice_service import purge_expired_voice_messages


async def purge_expired() -> dict[str, int]:
    """Run every purge in its own transaction and return deleted counts."""
    counts: dict[str, int] = {}
    async with async_session_maker() as db:
        counts["messages"] = await purge_expired_messages(db)
        counts["voice_messages"] = await purge_expired_voice_messages(db)
        counts["call_signals"] = await purge_expired_signals(db)
        counts["waiting_entries"] = await purge_stale_waiting_entries(db)
    return counts


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    counts = asyncio.run(purge_expired())
    for table, deleted in counts.items():
        print(f"{table}: {deleted} deleted")
