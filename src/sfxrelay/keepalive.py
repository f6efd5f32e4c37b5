from __future__ import annotations

import logging

from aiohttp import web

log = logging.getLogger("sfxrelay.keepalive")

KEEPALIVE_TEXT = "Bot is running"


def build_keepalive_app() -> web.Application:
    app = web.Application()

    async def alive(_: web.Request) -> web.Response:
        return web.Response(text=KEEPALIVE_TEXT, content_type="text/plain")

    # Uptime monitors hit arbitrary paths with arbitrary methods
    app.router.add_route("*", "/{tail:.*}", alive)
    return app


async def start_keepalive_server(port: int, host: str = "0.0.0.0") -> web.AppRunner:
    runner = web.AppRunner(build_keepalive_app())
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    log.info("Keep-alive server running on %s:%s", host, port)
    return runner
