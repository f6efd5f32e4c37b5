from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s:%(levelname)s:%(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> None:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger("sfxrelay").setLevel(resolved)

    # discord.py is chatty at INFO (gateway resumes, heartbeats)
    discord_level = logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING
    logging.getLogger("discord").setLevel(discord_level)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)

    logging.getLogger("sfxrelay.logging").debug("Logging configured at %s", logging.getLevelName(resolved))
