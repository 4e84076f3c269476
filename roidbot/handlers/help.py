"""Help text."""

from __future__ import annotations

from typing import Dict, List

import discord

from roidbot.handlers.context import HandlerContext
from roidbot.store.db import EVENT_NAMES
from roidbot.utils.formatting import join_lines

ABOUT = (
    "I link Discord members to their Ethereum addresses and look up "
    "Influence asteroids on chain. Verified owners show up next to the "
    "asteroids they hold."
)

TOPICS: Dict[str, str] = {
    "about": ABOUT,
    "verify": (
        "`{p}verify <address>` starts linking an address to your account. "
        "I'll DM you a message to sign; reply to that DM with the signature."
    ),
    "address": (
        "`{p}address [@user|name]` shows the verified address of a user "
        "(you by default)."
    ),
    "user": "`{p}user <address>` shows who verified an address.",
    "asteroid": (
        "`{p}asteroid <id>` (or `{p}roid <id>`) shows the owner of an asteroid."
    ),
    "owned": (
        "`{p}owned [@user|name]` lists the asteroids held by a user's verified "
        "address."
    ),
    "events": (
        "`{p}events` shows which on-chain events are announced in this channel. "
        "`{p}events <event> on|off` toggles one and `{p}events clear` turns all "
        "off. Events: " + ", ".join(EVENT_NAMES) + ". Needs Manage Channels."
    ),
}


def general_help(prefix: str) -> str:
    return join_lines(
        [
            "**Commands**",
            f"`{prefix}help [topic]` this message, or help on one command",
            f"`{prefix}about` what I do",
            f"`{prefix}ping` check I'm alive",
            f"`{prefix}verify <address>` link your address",
            f"`{prefix}address [@user]` show a verified address",
            f"`{prefix}user <address>` show who owns an address",
            f"`{prefix}asteroid <id>` show an asteroid",
            f"`{prefix}owned [@user]` list owned asteroids",
            f"`{prefix}events` channel event announcements",
        ]
    )


async def show_help(
    message: discord.Message, args: List[str], ctx: HandlerContext
) -> None:
    if not args:
        await message.reply(general_help(ctx.prefix))
        return

    topic = args[0].lower().removeprefix(ctx.prefix)
    if topic == "roid":
        topic = "asteroid"
    text = TOPICS.get(topic)
    if text is None:
        await message.reply(f"No help for `{args[0]}`.")
        return
    await message.reply(text.format(p=ctx.prefix))
