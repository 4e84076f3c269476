"""Wallet address verification handshake.

``verify <address>`` opens a pending session and DMs the user a challenge to
sign through the verification link. The next DM from that user is taken as
the signature: if it recovers to the claimed address the binding is stored,
otherwise the session is dropped and the user has to start over.
"""

from __future__ import annotations

import json
from typing import List, Optional
from urllib.parse import quote

import discord
from eth_account import Account
from eth_account.messages import encode_defunct

from roidbot.handlers.context import HandlerContext, PendingVerification
from roidbot.handlers.user_info import parse_address
from roidbot.store.repository import Repository
from roidbot.utils.logging import get_logger

logger = get_logger(__name__)

UNAVAILABLE = "Verification is not available right now."


class InvalidSignature(ValueError):
    """The verification payload could not be parsed or recovered."""


def is_pending(message: discord.Message, ctx: HandlerContext) -> bool:
    """Whether a DM should be consumed as a verification payload."""
    return message.guild is None and message.author.id in ctx.sessions


def build_verification_link(template: str, session: PendingVerification) -> str:
    """Fill the {message} and {address} placeholders; other braces pass through."""
    return template.replace("{message}", quote(session.challenge)).replace(
        "{address}", session.address
    )


def recover_signer(payload: str, challenge: str) -> str:
    """Return the address that signed ``challenge``.

    ``payload`` is a hex signature, or a JSON object carrying it under
    ``sig``/``signature`` with the signed text under ``msg``.
    """
    payload = payload.strip()
    signature: Optional[str] = payload
    if payload.startswith("{"):
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise InvalidSignature("payload is not valid JSON") from exc
        if not isinstance(data, dict):
            raise InvalidSignature("payload is not a JSON object")
        signed = data.get("msg")
        if signed is not None and signed != challenge:
            raise InvalidSignature("signed message does not match the challenge")
        signature = data.get("sig") or data.get("signature")

    if not signature:
        raise InvalidSignature("missing signature")
    try:
        return Account.recover_message(encode_defunct(text=challenge), signature=signature)
    except Exception as exc:
        raise InvalidSignature(str(exc)) from exc


async def prepare_verification(
    message: discord.Message, args: List[str], ctx: HandlerContext
) -> None:
    address = parse_address(args)
    if not address:
        await message.reply(f"Usage: `{ctx.prefix}verify <address>`")
        return
    if not ctx.verification_link:
        await message.reply(UNAVAILABLE)
        return

    session = ctx.sessions.start(message.author.id, address)
    link = build_verification_link(ctx.verification_link, session)
    instructions = (
        f"To prove you own `{address}`, sign this message with it:\n"
        f"```{session.challenge}```\n"
        f"You can sign it here: <{link}>\n"
        "Then reply to me with the signature."
    )
    try:
        await message.author.send(instructions)
    except discord.Forbidden:
        ctx.sessions.pop(message.author.id)
        await message.reply("I can't DM you. Enable direct messages and try again.")
        return

    logger.info("verification_started", user_id=message.author.id, address=address)
    if message.guild is not None:
        await message.reply("Check your DMs to finish verifying your address.")


async def complete_verification(
    message: discord.Message, args: List[str], ctx: HandlerContext
) -> None:
    session = ctx.sessions.pop(message.author.id)
    if session is None:
        return

    payload = args[0] if args else ""
    try:
        signer = recover_signer(payload, session.challenge)
    except InvalidSignature as exc:
        logger.info(
            "verification_invalid_payload",
            user_id=message.author.id,
            error=str(exc),
        )
        await message.reply(
            "That signature could not be read. "
            f"Run `{ctx.prefix}verify <address>` to try again."
        )
        return

    if signer.lower() != session.address.lower():
        logger.info(
            "verification_mismatch",
            user_id=message.author.id,
            claimed=session.address,
            recovered=signer,
        )
        await message.reply(
            f"That signature is from `{signer}`, not `{session.address}`. "
            f"Run `{ctx.prefix}verify <address>` to try again."
        )
        return

    async with ctx.db.session() as db_session:
        await Repository(db_session).set_address(session.discord_id, session.address)
    logger.info(
        "verification_completed", user_id=message.author.id, address=session.address
    )
    await message.reply(f"Verified! `{session.address}` is now linked to you.")
