import asyncio
import logging

from .logging_utils import setup_logging
from .bot.app import create_bot, get_token


async def _main_async() -> None:
    """Run the discord bot until it disconnects."""
    bot = create_bot()
    token = get_token()

    async with bot:
        await bot.start(token)


def main() -> None:
    setup_logging()
    logging.getLogger("boot").info("Starting RanchBot runtime ...")
    try:
        asyncio.run(_main_async())
    except KeyboardInterrupt:
        logging.getLogger("boot").info("Exited (KeyboardInterrupt).")


if __name__ == "__main__":
    main()
