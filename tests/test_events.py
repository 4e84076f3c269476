import asyncio

import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from fakes import DummyGuild, DummyMessage, DummyUser, FakeChain
from roidbot.chain import ChainEvent
from roidbot.handlers.router import MessageDispatcher
from roidbot.jobs.events import JOB_ID, EventAnnouncer
from roidbot.store.db import ChannelEvents
from roidbot.store.repository import Repository


def admin() -> DummyUser:
    return DummyUser(1, name="mod", manage_channels=True)


async def send(dispatcher, content, author=None, channel_id=555, guild=True):
    message = DummyMessage(
        content,
        author or admin(),
        guild=DummyGuild() if guild else None,
        channel_id=channel_id,
    )
    await dispatcher.handle(message)
    return message


@pytest.mark.asyncio
async def test_events_shows_defaults_without_saving(ctx):
    message = await send(MessageDispatcher(ctx), "#events")

    assert "Transfer: off" in message.replies[0]
    assert "AsteroidScanned: off" in message.replies[0]
    async with ctx.db.session() as session:
        assert await Repository(session).list_event_channels("Transfer") == []


@pytest.mark.asyncio
async def test_events_toggle_and_clear(ctx):
    dispatcher = MessageDispatcher(ctx)

    toggled = await send(dispatcher, "#events transfer on")
    assert "Transfer: on" in toggled.replies[0]
    async with ctx.db.session() as session:
        rows = await Repository(session).list_event_channels("Transfer")
        assert [row.channel for row in rows] == ["555"]

    cleared = await send(dispatcher, "#events clear")
    assert cleared.replies == ["Event announcements turned off for this channel."]
    async with ctx.db.session() as session:
        assert await Repository(session).list_event_channels("Transfer") == []


@pytest.mark.asyncio
async def test_events_rejects_bad_arguments(ctx):
    message = await send(MessageDispatcher(ctx), "#events Mining on")

    assert message.replies[0].startswith("Usage: `#events")


@pytest.mark.asyncio
async def test_events_requires_permission(ctx):
    message = await send(
        MessageDispatcher(ctx), "#events transfer on", author=DummyUser(2)
    )

    assert message.replies == ["You need the Manage Channels permission to do that."]


@pytest.mark.asyncio
async def test_events_not_available_in_dms(ctx):
    message = await send(MessageDispatcher(ctx), "#events", guild=False)

    assert message.replies == ["Event announcements are configured in server channels."]


class DummyChannel:
    def __init__(self) -> None:
        self.sent = []

    async def send(self, text: str, **kwargs) -> None:
        self.sent.append(text)


class DummyClient:
    def __init__(self, channels) -> None:
        self.channels = channels

    def get_channel(self, channel_id: int):
        return self.channels.get(channel_id)


def make_announcer(db, chain, client):
    return EventAnnouncer(
        scheduler=AsyncIOScheduler(),
        db=db,
        chain=chain,
        client=client,
        interval_seconds=60,
        asteroid_url="https://game.example/asteroids/{id}",
    )


@pytest.mark.asyncio
async def test_announcer_posts_new_events_to_subscribed_channels(db):
    async with db.session() as session:
        repo = Repository(session)
        await repo.set_channel_events(
            ChannelEvents(channel="10", Transfer=1, AsteroidScanned=0)
        )
        await repo.set_channel_events(
            ChannelEvents(channel="20", Transfer=0, AsteroidScanned=1)
        )
    transfers, scans = DummyChannel(), DummyChannel()
    chain = FakeChain()
    announcer = make_announcer(db, chain, DummyClient({10: transfers, 20: scans}))

    await announcer.run_cycle()
    assert chain.event_calls == []
    assert announcer.last_block == 100

    chain.block = 105
    chain.events["Transfer"] = [
        ChainEvent(
            name="Transfer",
            asteroid_id=42,
            block_number=103,
            tx_hash="0xabc",
            args={
                "from": "0x1111111111111111111111111111111111111111",
                "to": "0x2222222222222222222222222222222222222222",
                "tokenId": 42,
            },
        )
    ]
    await announcer.run_cycle()

    assert ("Transfer", 101, 105) in chain.event_calls
    assert len(transfers.sent) == 1
    assert "#42" in transfers.sent[0]
    assert "https://game.example/asteroids/42" in transfers.sent[0]
    assert scans.sent == []
    assert announcer.last_block == 105


@pytest.mark.asyncio
async def test_announcer_survives_provider_errors(db):
    chain = FakeChain(fail=True)
    announcer = make_announcer(db, chain, DummyClient({}))

    await announcer.run_cycle()

    assert announcer.last_block is None


@pytest.mark.asyncio
async def test_announcer_registers_job(db):
    scheduler = AsyncIOScheduler(event_loop=asyncio.get_running_loop())
    announcer = EventAnnouncer(
        scheduler=scheduler,
        db=db,
        chain=FakeChain(),
        client=DummyClient({}),
        interval_seconds=30,
        asteroid_url="{id}",
    )

    announcer.start()
    scheduler.start()

    assert scheduler.get_job(JOB_ID) is not None
    scheduler.shutdown(wait=False)
