# ==========================================================
# RanchBot – Discord Bot (app.py)
#
#   - Prefix commands: payout, wipe
#   - Ranch list + runtime knobs come from config.json (see ranchbot.config)
#   - Status notices are transient; invoking messages are cleaned up
# ==========================================================

import logging
import os
from functools import partial

import discord
from discord.ext import commands

from ..config import BotConfig, load_config
from ..payout import PayoutCommand
from ..stats_store import wipe_stats
from ..tracking import get_current_tracking_period
from ..utils.messages import delete_after, send_transient

logger = logging.getLogger("bot")

WIPED_TEXT = "Ranch stats wiped."
NOTHING_TO_WIPE_TEXT = "No ranch stats files configured; nothing to wipe."


class RanchCommands(commands.Cog):
    """Payout + wipe commands for every configured ranch."""

    def __init__(self, bot: commands.Bot, config: BotConfig):
        self.bot = bot
        self.config = config
        self.payout = PayoutCommand(
            config.ranches,
            wipe=self.wipe_ranches,
            period_resolver=partial(get_current_tracking_period, config.tracking_week_start),
            backup_dir=config.backup_dir,
        )

    async def wipe_ranches(self, message: discord.Message) -> None:
        """Empty every ranch stats file and tell the channel about it."""
        wiped = await wipe_stats(self.config.ranches)
        logger.info("Wipe finished (ranches=%s)", len(wiped))

        text = WIPED_TEXT if wiped else NOTHING_TO_WIPE_TEXT
        await send_transient(
            message.channel,
            text,
            delay=self.payout.notice_delete_delay,
            schedule=self.payout.schedule,
        )

    @commands.command(name="payout")
    async def payout_command(self, ctx: commands.Context):
        """Send a payout message to the designated payout channels for each ranch."""
        await self.payout.execute(self.bot, ctx.message)

    @commands.command(name="wipe")
    async def wipe_command(self, ctx: commands.Context):
        """Reset every ranch stats file."""
        try:
            await self.wipe_ranches(ctx.message)
        finally:
            self.payout.schedule(delete_after(ctx.message, self.payout.invoker_delete_delay))


def create_bot(config: BotConfig | None = None) -> commands.Bot:
    if config is None:
        config = load_config()

    intents = discord.Intents.default()
    intents.guilds = True
    intents.message_content = True

    client = commands.Bot(command_prefix=config.prefix, intents=intents)

    @client.event
    async def setup_hook():
        await client.add_cog(RanchCommands(client, config))
        logger.info("Ranch commands registered (ranches=%s)", len(config.ranches))

    @client.event
    async def on_ready():
        logger.info("Discord ready (user=%s)", client.user)

    return client


def get_token() -> str:
    token = os.getenv("DISCORD_TOKEN")
    if not token:
        raise RuntimeError("DISCORD_TOKEN environment variable is not set")
    return token


if __name__ == "__main__":
    create_bot().run(get_token())
