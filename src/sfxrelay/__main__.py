from __future__ import annotations

import asyncio
import logging
import signal

from dotenv import load_dotenv

from .bot import SfxRelayBot
from .config import load_settings
from .keepalive import start_keepalive_server
from .logging_setup import setup_logging

log = logging.getLogger("sfxrelay.main")


async def main_async() -> None:
    load_dotenv()
    settings = load_settings()
    setup_logging(settings.log_level)

    runner = await start_keepalive_server(settings.keepalive_port) if settings.keepalive_enabled else None

    bot = SfxRelayBot(settings)
    stop_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows
            pass

    try:
        async with bot:
            bot_task = asyncio.create_task(bot.start(settings.token), name="sfxrelay-bot")
            stop_task = asyncio.create_task(stop_event.wait(), name="sfxrelay-stop")
            done, pending = await asyncio.wait({bot_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)

            if stop_event.is_set():
                log.info("Shutdown signal received; closing bot...")
                await bot.close()

            for t in pending:
                t.cancel()
            if bot_task in done:
                # Surface login failures and gateway crashes
                bot_task.result()
    finally:
        if runner is not None:
            await runner.cleanup()


def main() -> None:
    asyncio.run(main_async())


if __name__ == "__main__":
    main()
