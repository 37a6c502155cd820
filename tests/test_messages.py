"""
Tests for transient notices and delayed deletion
"""
import logging
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from ranchbot.utils.messages import UNKNOWN_MESSAGE, delete_after, send_transient


def _http_error(cls, status, code):
    response = MagicMock(status=status, reason="err")
    return cls(response, {"code": code, "message": "err"})


def _message(side_effect=None):
    msg = MagicMock()
    msg.id = 55
    msg.delete = AsyncMock(side_effect=side_effect)
    return msg


@pytest.mark.asyncio
async def test_delete_after_deletes():
    msg = _message()
    await delete_after(msg, 0)
    msg.delete.assert_awaited_once()


@pytest.mark.asyncio
async def test_unknown_message_is_silent(caplog):
    msg = _message(_http_error(discord.NotFound, 404, UNKNOWN_MESSAGE))
    with caplog.at_level(logging.DEBUG, logger="messages"):
        await delete_after(msg, 0)
    assert [r for r in caplog.records if r.name == "messages"] == []


@pytest.mark.asyncio
async def test_other_not_found_is_logged(caplog):
    msg = _message(_http_error(discord.NotFound, 404, 10003))
    with caplog.at_level(logging.WARNING, logger="messages"):
        await delete_after(msg, 0)
    assert len(caplog.records) == 1


@pytest.mark.asyncio
async def test_forbidden_is_logged_not_raised(caplog):
    msg = _message(_http_error(discord.Forbidden, 403, 50013))
    with caplog.at_level(logging.WARNING, logger="messages"):
        await delete_after(msg, 0)
    assert "Failed to delete message 55" in caplog.records[0].getMessage()


@pytest.mark.asyncio
async def test_send_transient_schedules_deletion():
    notice = _message()
    channel = MagicMock()
    channel.send = AsyncMock(return_value=notice)
    scheduled = []

    result = await send_transient(channel, "hello", delay=0, schedule=scheduled.append)

    assert result is notice
    channel.send.assert_awaited_once_with("hello")
    assert len(scheduled) == 1
    await scheduled[0]
    notice.delete.assert_awaited_once()


@pytest.mark.asyncio
async def test_send_transient_failure_returns_none():
    channel = MagicMock()
    channel.send = AsyncMock(side_effect=_http_error(discord.Forbidden, 403, 50013))
    scheduled = []

    assert await send_transient(channel, "hello", delay=0, schedule=scheduled.append) is None
    assert scheduled == []
