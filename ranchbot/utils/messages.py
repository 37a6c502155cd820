"""Transient notices and delayed deletion.

Status/error notices from commands are short-lived: they are sent, then
deleted after a fixed delay so command channels stay clean.

Deletion is best-effort. A message that is already gone is the common case
(someone else deleted it, or the channel was purged), so Discord's
"Unknown Message" error is ignored without logging.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional

import discord

logger = logging.getLogger("messages")

# Discord JSON error code for "Unknown Message".
UNKNOWN_MESSAGE = 10008

Scheduler = Callable[[Coroutine[Any, Any, None]], object]


async def delete_after(message: discord.Message, delay: float) -> None:
    """Sleep, then delete `message`. Never raises for Discord API failures."""
    await asyncio.sleep(delay)
    try:
        await message.delete()
    except discord.NotFound as e:
        if e.code != UNKNOWN_MESSAGE:
            logger.warning(f"Failed to delete message {message.id}: {e}")
    except discord.HTTPException as e:
        logger.warning(f"Failed to delete message {message.id}: {e}")


async def send_transient(
    channel: discord.abc.Messageable,
    content: str,
    *,
    delay: float,
    schedule: Scheduler,
) -> Optional[discord.Message]:
    """Send a notice and schedule its deletion.

    Returns the sent message, or None if sending failed (logged, not raised).
    """
    try:
        msg = await channel.send(content)
    except discord.HTTPException as e:
        logger.error(f"Failed to send notice {content!r}: {e}")
        return None

    schedule(delete_after(msg, delay))
    return msg
