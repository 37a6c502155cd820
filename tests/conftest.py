"""
Pytest configuration and fixtures
"""
import asyncio
import json
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from ranchbot.config import Ranch
from ranchbot.payout import PayoutCommand
from ranchbot.tracking import TrackingPeriod

FIXED_PERIOD = TrackingPeriod(start=date(2024, 6, 2), end=date(2024, 6, 8))


def make_message(message_id: int = 1000):
    """Invoking message whose channel hands back a deletable notice for every send."""
    message = MagicMock(name=f"message-{message_id}")
    message.id = message_id
    message.delete = AsyncMock()

    def _notice(*args, **kwargs):
        notice = MagicMock(name="notice")
        notice.id = message_id + 1
        notice.delete = AsyncMock()
        return notice

    message.channel.send = AsyncMock(side_effect=_notice)
    return message


def make_channel(channel_id: int):
    channel = MagicMock(name=f"channel-{channel_id}")
    channel.id = channel_id
    channel.send = AsyncMock()
    return channel


def make_client(*channels):
    by_id = {c.id: c for c in channels}
    client = MagicMock(name="client")
    client.get_channel = MagicMock(side_effect=by_id.get)
    return client


def write_stats(path, payload) -> str:
    if isinstance(payload, str):
        path.write_text(payload, encoding="utf-8")
    else:
        path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


async def drain(command: PayoutCommand) -> None:
    """Wait for every deferred deletion/wipe, including ones scheduled by other deferred work."""
    while command.pending_tasks:
        await asyncio.gather(*command.pending_tasks)


@pytest.fixture
def backup_dir(tmp_path):
    return tmp_path / "backups"


@pytest.fixture
def wipe():
    return AsyncMock()


@pytest.fixture
def build_command(backup_dir, wipe):
    def _build(ranches, **kwargs):
        kwargs.setdefault("period_resolver", lambda: FIXED_PERIOD)
        return PayoutCommand(
            ranches,
            wipe=wipe,
            backup_dir=backup_dir,
            notice_delete_delay=0,
            invoker_delete_delay=0,
            wipe_delay=0,
            **kwargs,
        )

    return _build


@pytest.fixture
def ranch_factory(tmp_path):
    def _ranch(name, stats=None, channel_id=None):
        data_file = None
        if stats is not None:
            data_file = write_stats(tmp_path / f"{name}.json", stats)
        return Ranch(name=name, data_file=data_file, payout_channel_id=channel_id)

    return _ranch
