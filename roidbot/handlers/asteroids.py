"""Asteroid lookups against the chain."""

from __future__ import annotations

from typing import List

import discord

from roidbot.chain import AsteroidNotFound
from roidbot.handlers.context import HandlerContext
from roidbot.handlers.user_info import lookup_address, resolve_target_user
from roidbot.store.repository import Repository
from roidbot.utils.formatting import format_asteroid_details, format_asteroid_list
from roidbot.utils.logging import get_logger

logger = get_logger(__name__)

CHAIN_UNAVAILABLE = "On-chain lookups are not available right now."
MAX_LISTED_ASTEROIDS = 50


def parse_asteroid_id(args: List[str]) -> int | None:
    if not args:
        return None
    value = args[0].lstrip("#")
    if not value.isdecimal() or int(value) <= 0:
        return None
    return int(value)


async def show_asteroid_details(
    message: discord.Message, args: List[str], ctx: HandlerContext
) -> None:
    asteroid_id = parse_asteroid_id(args)
    if asteroid_id is None:
        await message.reply(f"Usage: `{ctx.prefix}asteroid <id>`")
        return
    if ctx.chain is None:
        await message.reply(CHAIN_UNAVAILABLE)
        return

    try:
        details = await ctx.chain.get_asteroid(asteroid_id)
    except AsteroidNotFound:
        await message.reply(f"Could not find asteroid #{asteroid_id}.")
        return
    except Exception as exc:
        logger.error("asteroid_lookup_failed", asteroid_id=asteroid_id, error=str(exc))
        await message.reply(f"Could not find asteroid #{asteroid_id}.")
        return

    async with ctx.db.session() as session:
        owner_id = await Repository(session).get_discord_id(details.owner)

    await message.reply(
        format_asteroid_details(details, owner_id, ctx.asteroid_url),
        allowed_mentions=discord.AllowedMentions.none(),
    )


async def show_user_asteroids(
    message: discord.Message, args: List[str], ctx: HandlerContext
) -> None:
    user = resolve_target_user(message, args)
    if user is None:
        await message.reply(f"Could not find user `{args[0]}`.")
        return
    if ctx.chain is None:
        await message.reply(CHAIN_UNAVAILABLE)
        return

    address = await lookup_address(ctx, user.id)
    if not address:
        await message.reply(
            f"{user.display_name} has not verified an address. "
            f"Use `{ctx.prefix}verify <address>` first."
        )
        return

    try:
        asteroid_ids = await ctx.chain.get_owned_asteroids(
            address, limit=MAX_LISTED_ASTEROIDS
        )
        total = len(asteroid_ids)
        if total == MAX_LISTED_ASTEROIDS:
            total = await ctx.chain.count_owned_asteroids(address)
    except Exception as exc:
        logger.error("owned_asteroids_failed", address=address, error=str(exc))
        await message.reply(f"Could not load asteroids for `{address}`.")
        return

    await message.reply(
        f"{user.display_name} (`{address}`)\n"
        + format_asteroid_list(asteroid_ids, total)
    )
