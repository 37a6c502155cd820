# ==========================================================
# RanchBot – Ranch Payout Workflow
#
# One run of the payout command:
#   1. Refuse to start if a run is already active (no queuing)
#   2. Resolve the tracking period (fatal if it fails)
#   3. For each ranch: read stats -> backup -> compute -> post report
#      (a broken ranch is logged and skipped, never fatal)
#   4. Post "processed" notice and schedule the wipe
#
# The source stats files are only read here. Clearing them is the wipe's job.
# ==========================================================

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Coroutine, Dict, List, Optional, Sequence

import discord

from .config import Ranch
from .logging_utils import RanchLoggerAdapter, new_error_id
from .stats_store import StatsRecord, ensure_backup_dir, read_stats, write_backup
from .tracking import TrackingPeriod, get_current_tracking_period
from .utils.messages import delete_after, send_transient

logger = logging.getLogger("payout")

# Dollars per unit; milk and eggs pay the same.
PAYOUT_RATE = 1.25

NOTICE_DELETE_DELAY = 5
INVOKER_DELETE_DELAY = 5
WIPE_DELAY = 10

ALREADY_ACTIVE_TEXT = "A payout process is already active. Please wait for it to complete."
PERIOD_ERROR_TEXT = "An error occurred while calculating the tracking period."
PROCESS_ERROR_TEXT = "An error occurred while processing payouts. Check logs."

WipeAction = Callable[[discord.Message], Awaitable[None]]
PeriodResolver = Callable[[], TrackingPeriod]


class RanchStatus(str, Enum):
    SENT = "sent"
    SKIPPED_MISSING_CONFIG = "skipped_missing_config"
    SKIPPED_EMPTY = "skipped_empty"
    CHANNEL_NOT_FOUND = "channel_not_found"
    FAILED = "failed"


class RunStatus(str, Enum):
    COMPLETED = "completed"
    ALREADY_RUNNING = "already_running"
    PERIOD_FAILED = "period_failed"
    FAILED = "failed"


@dataclass
class RanchResult:
    ranch: str
    status: RanchStatus
    error: Optional[str] = None
    backup: Optional[Path] = None


@dataclass
class PayoutRun:
    status: RunStatus
    period: Optional[TrackingPeriod] = None
    results: List[RanchResult] = field(default_factory=list)


# ==========================================================
# Arithmetic + formatting
# ==========================================================


def compute_payout(entry: Dict[str, Any]) -> float:
    """Dollar amount owed for one player's milk/egg counts (missing counts are 0)."""
    milk = entry.get("milk") or 0
    eggs = entry.get("eggs") or 0
    return (milk * PAYOUT_RATE) + (eggs * PAYOUT_RATE)


def format_amount(amount: float) -> str:
    return f"${amount:.2f}"


def format_report(ranch_name: str, period: TrackingPeriod, stats: StatsRecord) -> str:
    """Build the payout report as one code block. Players keep file order."""
    lines = [
        "```",
        f"🥛 **{ranch_name} Payout** 🥚",
        f"📅 **Dates:** {period.start_text} - {period.end_text}",
        "",
    ]
    for mention, entry in stats.items():
        lines.append(f"🤠 **{mention}**: **{format_amount(compute_payout(entry))}**")
    lines += [
        "",
        "---",
        "",
        "💡 *This payout is for milk and eggs only!*",
        "```",
    ]
    return "\n".join(lines)


# ==========================================================
# Command
# ==========================================================


class PayoutCommand:
    """Owns the payout command lifecycle: guard flag, per-ranch loop, deferred cleanup."""

    def __init__(
        self,
        ranches: Sequence[Ranch],
        *,
        wipe: WipeAction,
        period_resolver: PeriodResolver = get_current_tracking_period,
        backup_dir: str | Path = "backups",
        notice_delete_delay: float = NOTICE_DELETE_DELAY,
        invoker_delete_delay: float = INVOKER_DELETE_DELAY,
        wipe_delay: float = WIPE_DELAY,
    ):
        self.ranches = list(ranches)
        self.wipe = wipe
        self.period_resolver = period_resolver
        self.backup_dir = Path(backup_dir)
        self.notice_delete_delay = notice_delete_delay
        self.invoker_delete_delay = invoker_delete_delay
        self.wipe_delay = wipe_delay

        self.active = False
        self._pending: set[asyncio.Task] = set()

    # ---------------- deferred work ----------------

    @property
    def pending_tasks(self) -> tuple[asyncio.Task, ...]:
        return tuple(self._pending)

    def schedule(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        """Fire-and-forget. Tasks are only tracked so they aren't garbage collected mid-sleep."""
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _notice(self, channel: discord.abc.Messageable, content: str) -> Optional[discord.Message]:
        return await send_transient(channel, content, delay=self.notice_delete_delay, schedule=self.schedule)

    async def _wipe_later(self, message: discord.Message) -> None:
        await asyncio.sleep(self.wipe_delay)
        try:
            await self.wipe(message)
        except Exception:
            logger.exception("Scheduled wipe failed")

    # ---------------- workflow ----------------

    async def execute(self, client: discord.Client, message: discord.Message) -> PayoutRun:
        if self.active:
            logger.info("Payout requested while another run is active; ignoring.")
            await self._notice(message.channel, ALREADY_ACTIVE_TEXT)
            return PayoutRun(RunStatus.ALREADY_RUNNING)

        self.active = True
        try:
            try:
                period = self.period_resolver()
            except Exception as e:
                logger.error(f"Failed to calculate tracking period: {e}")
                await self._notice(message.channel, PERIOD_ERROR_TEXT)
                return PayoutRun(RunStatus.PERIOD_FAILED)

            run = PayoutRun(RunStatus.COMPLETED, period=period)
            try:
                await ensure_backup_dir(self.backup_dir)

                for ranch in self.ranches:
                    run.results.append(await self.process_ranch(client, ranch, period))

                await self._notice(
                    message.channel,
                    f"Payouts processed. Data will be wiped in {self.wipe_delay:g} seconds...",
                )
                self.schedule(self._wipe_later(message))
                logger.info(
                    "Payout run complete (ranches=%s, sent=%s)",
                    len(run.results),
                    sum(1 for r in run.results if r.status is RanchStatus.SENT),
                )
            except Exception as e:
                err_id = new_error_id()
                logger.error(f"[{err_id}] Payout process error: {e}")
                await self._notice(message.channel, PROCESS_ERROR_TEXT)
                run.status = RunStatus.FAILED

            return run
        finally:
            self.active = False
            self.schedule(delete_after(message, self.invoker_delete_delay))

    async def process_ranch(self, client: discord.Client, ranch: Ranch, period: TrackingPeriod) -> RanchResult:
        """Pay out one ranch. Every failure comes back as a RanchResult, never as an exception."""
        log = RanchLoggerAdapter.for_ranch("payout", ranch.name)

        try:
            if not ranch.data_file or not ranch.payout_channel_id:
                log.warning("Missing dataFile or payoutChannelId.")
                return RanchResult(ranch.name, RanchStatus.SKIPPED_MISSING_CONFIG)

            stats = await read_stats(ranch.data_file)
            if not stats:
                log.info("No stats available for payout.")
                return RanchResult(ranch.name, RanchStatus.SKIPPED_EMPTY)

            # Snapshot before anything else so the archive matches what was read.
            backup = await write_backup(self.backup_dir, ranch.name, stats)
            log.info(f"Payout data backed up at {backup}")

            report = format_report(ranch.name, period, stats)

            channel = client.get_channel(ranch.payout_channel_id)
            if channel is None:
                log.warning(f"Payout channel not found: {ranch.payout_channel_id}")
                return RanchResult(ranch.name, RanchStatus.CHANNEL_NOT_FOUND, backup=backup)

            await channel.send(content=report)
            log.info("Payout message sent.")
            return RanchResult(ranch.name, RanchStatus.SENT, backup=backup)

        except Exception as e:
            log.error(f"Error processing payout: {e}")
            return RanchResult(ranch.name, RanchStatus.FAILED, error=type(e).__name__)
