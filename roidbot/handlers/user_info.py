"""Address <-> Discord user lookups."""

from __future__ import annotations

from typing import List, Optional

import discord
from web3 import Web3

from roidbot.handlers.context import HandlerContext
from roidbot.store.repository import Repository
from roidbot.utils.formatting import ETHERSCAN_ADDRESS_URL, mention
from roidbot.utils.logging import get_logger

logger = get_logger(__name__)


def resolve_target_user(
    message: discord.Message, args: List[str]
) -> Optional[discord.abc.User]:
    """Pick the user a lookup is about.

    The first mention wins, then a guild member matched by name from the
    first argument, then the author. Returns None for an unknown name.
    """
    if message.mentions:
        return message.mentions[0]
    if args:
        if message.guild is None:
            return None
        return message.guild.get_member_named(args[0])
    return message.author


def parse_address(args: List[str]) -> Optional[str]:
    """Return the first argument as a checksum address, or None if malformed."""
    if not args or not Web3.is_address(args[0]):
        return None
    return Web3.to_checksum_address(args[0])


async def lookup_address(ctx: HandlerContext, discord_id: int | str) -> Optional[str]:
    async with ctx.db.session() as session:
        return await Repository(session).get_address(str(discord_id))


async def show_address(
    message: discord.Message, args: List[str], ctx: HandlerContext
) -> None:
    user = resolve_target_user(message, args)
    if user is None:
        await message.reply(f"Could not find user `{args[0]}`.")
        return

    address = await lookup_address(ctx, user.id)
    if not address:
        if user.id == message.author.id:
            text = (
                "You have not verified an address yet. "
                f"Use `{ctx.prefix}verify <address>` to link one."
            )
        else:
            text = f"{user.display_name} has not verified an address."
        await message.reply(text)
        return

    link = ETHERSCAN_ADDRESS_URL.format(address=address)
    await message.reply(f"{user.display_name}: `{address}`\n<{link}>")


async def show_user(
    message: discord.Message, args: List[str], ctx: HandlerContext
) -> None:
    address = parse_address(args)
    if not address:
        await message.reply(f"Usage: `{ctx.prefix}user <address>`")
        return

    async with ctx.db.session() as session:
        discord_id = await Repository(session).get_discord_id(address)

    if not discord_id:
        await message.reply(f"No user is bound to `{address}`.")
        return
    await message.reply(
        f"`{address}` belongs to {mention(discord_id)}",
        allowed_mentions=discord.AllowedMentions.none(),
    )
