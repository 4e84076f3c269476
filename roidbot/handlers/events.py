"""Per-channel on-chain event announcement settings."""

from __future__ import annotations

from typing import Dict, List

import discord

from roidbot.handlers.context import HandlerContext
from roidbot.store.db import EVENT_NAMES, ChannelEvents
from roidbot.store.repository import Repository

SWITCHES: Dict[str, int] = {"on": 1, "off": 0}
_EVENTS_BY_KEY = {name.lower(): name for name in EVENT_NAMES}


def describe(events: ChannelEvents) -> str:
    lines = [f"Event announcements for <#{events.channel}>:"]
    for name, enabled in events.flags.items():
        lines.append(f"• {name}: {'on' if enabled else 'off'}")
    return "\n".join(lines)


def usage(prefix: str) -> str:
    names = "|".join(EVENT_NAMES)
    return f"Usage: `{prefix}events [{names}] [on|off]` or `{prefix}events clear`"


def can_manage(message: discord.Message) -> bool:
    permissions = getattr(message.author, "guild_permissions", None)
    return bool(permissions and permissions.manage_channels)


async def channel_events(
    message: discord.Message, args: List[str], ctx: HandlerContext
) -> None:
    if message.guild is None:
        await message.reply("Event announcements are configured in server channels.")
        return
    if not can_manage(message):
        await message.reply("You need the Manage Channels permission to do that.")
        return

    channel = str(message.channel.id)
    async with ctx.db.session() as session:
        repo = Repository(session)

        if not args:
            await message.reply(describe(await repo.get_channel_events(channel)))
            return

        if len(args) == 1 and args[0].lower() == "clear":
            await repo.remove_channel_events(channel)
            await message.reply("Event announcements turned off for this channel.")
            return

        event_name = _EVENTS_BY_KEY.get(args[0].lower())
        switch = SWITCHES.get(args[1].lower()) if len(args) == 2 else None
        if event_name is None or switch is None:
            await message.reply(usage(ctx.prefix))
            return

        events = await repo.get_channel_events(channel)
        setattr(events, event_name, switch)
        await repo.set_channel_events(events)
        await message.reply(describe(await repo.get_channel_events(channel)))
