"""Scheduled announcement of on-chain asteroid events."""

from __future__ import annotations

from typing import Dict, List, Optional

import discord
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from roidbot.chain import AsteroidClient, ChainEvent
from roidbot.store.db import EVENT_NAMES, Database
from roidbot.store.repository import Repository
from roidbot.utils.formatting import format_chain_event
from roidbot.utils.logging import get_logger

logger = get_logger(__name__)

JOB_ID = "announce_chain_events"


class EventAnnouncer:
    """Poll the asteroid contracts and post new events to subscribed channels."""

    def __init__(
        self,
        scheduler: AsyncIOScheduler,
        db: Database,
        chain: AsteroidClient,
        client: discord.Client,
        interval_seconds: int,
        asteroid_url: str,
    ) -> None:
        self.scheduler = scheduler
        self.db = db
        self.chain = chain
        self.client = client
        self.interval_seconds = interval_seconds
        self.asteroid_url = asteroid_url
        self.last_block: Optional[int] = None

    def start(self) -> None:
        """Register the polling job with the scheduler."""
        self.scheduler.add_job(
            self.run_cycle,
            trigger="interval",
            seconds=self.interval_seconds,
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        logger.info("event_announcer_started", interval=self.interval_seconds)

    async def run_cycle(self) -> None:
        try:
            latest = await self.chain.latest_block()
            if self.last_block is None:
                self.last_block = latest
                return
            if latest <= self.last_block:
                return

            from_block = self.last_block + 1
            events: Dict[str, List[ChainEvent]] = {}
            for event_name in EVENT_NAMES:
                events[event_name] = await self.chain.get_events(
                    event_name, from_block, latest
                )
            self.last_block = latest
        except Exception as exc:
            logger.error("chain_event_poll_failed", error=str(exc))
            return

        for event_name, found in events.items():
            if found:
                await self.announce(event_name, found)

    async def announce(self, event_name: str, found: List[ChainEvent]) -> None:
        async with self.db.session() as session:
            configs = await Repository(session).list_event_channels(event_name)

        for config in configs:
            channel = self.client.get_channel(int(config.channel))
            if channel is None:
                logger.warning("event_channel_missing", channel=config.channel)
                continue
            for event in found:
                try:
                    await channel.send(format_chain_event(event, self.asteroid_url))
                except discord.HTTPException as exc:
                    logger.error(
                        "event_announce_failed",
                        channel=config.channel,
                        event=event_name,
                        error=str(exc),
                    )
                    break
        logger.info(
            "chain_events_announced",
            event=event_name,
            count=len(found),
            channels=len(configs),
        )
