"""Application entrypoint."""

from __future__ import annotations

import asyncio
import sys

import discord
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from roidbot.chain import AsteroidClient
from roidbot.config import Settings, load_settings
from roidbot.handlers.context import HandlerContext
from roidbot.handlers.router import MessageDispatcher
from roidbot.jobs.events import EventAnnouncer
from roidbot.store.db import Database
from roidbot.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def report_degraded_features(settings: Settings) -> None:
    logger.info("prefix_configured", prefix=settings.prefix)
    if settings.test_user:
        logger.warning("test_user_mode", test_user=settings.test_user)
    if not settings.verification_link:
        logger.error(
            "verification_link_missing",
            detail="Users will not be able to verify their address",
        )
    if not settings.chain_enabled:
        logger.error(
            "infura_credentials_missing",
            detail="On-chain lookups and event announcements are disabled",
        )


def build_client(dispatcher: MessageDispatcher) -> discord.Client:
    intents = discord.Intents.default()
    intents.message_content = True
    intents.members = True
    client = discord.Client(intents=intents)

    @client.event
    async def on_ready() -> None:
        logger.info("discord_login_successful", user=str(client.user))
        dispatcher.start()

    @client.event
    async def on_message(message: discord.Message) -> None:
        dispatcher.submit(message)

    return client


async def main() -> None:
    try:
        settings = load_settings()
    except RuntimeError as exc:
        configure_logging()
        logger.error("configuration_invalid", error=str(exc))
        sys.exit(1)

    configure_logging(settings.log_level)
    report_degraded_features(settings)

    db = Database(settings.database_url)
    db.connect()
    await db.init_models()

    chain = AsteroidClient.from_settings(settings)
    ctx = HandlerContext.from_settings(settings, db, chain)
    dispatcher = MessageDispatcher(ctx)

    scheduler = AsyncIOScheduler()
    client = build_client(dispatcher)
    if chain is not None:
        announcer = EventAnnouncer(
            scheduler=scheduler,
            db=db,
            chain=chain,
            client=client,
            interval_seconds=settings.event_poll_seconds,
            asteroid_url=settings.asteroid_url,
        )
        announcer.start()
    scheduler.start()

    try:
        await client.start(settings.discord_token)
    finally:
        logger.info("bot_stopping")
        scheduler.shutdown(wait=False)
        await dispatcher.stop()
        if not client.is_closed():
            await client.close()
        await db.dispose()


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
