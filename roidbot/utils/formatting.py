"""Helpers for Discord message text."""

from __future__ import annotations

from typing import List, Sequence

from roidbot.chain import AsteroidDetails, ChainEvent

DISCORD_MESSAGE_LIMIT = 2000
ETHERSCAN_ADDRESS_URL = "https://etherscan.io/address/{address}"
ETHERSCAN_TX_URL = "https://etherscan.io/tx/{tx_hash}"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def mention(discord_id: str | int) -> str:
    return f"<@{discord_id}>"


def short_address(address: str) -> str:
    """Abbreviate ``0x1234...abcd`` style for inline display."""
    if not address or len(address) <= 12:
        return address or ""
    return f"{address[:6]}…{address[-4:]}"


def asteroid_link(template: str, asteroid_id: int) -> str:
    return template.format(id=asteroid_id)


def format_asteroid_details(
    details: AsteroidDetails,
    owner_id: str | None,
    page_template: str,
) -> str:
    lines = [f"**Asteroid #{details.id}**"]
    owner = f"`{details.owner}`"
    if owner_id:
        owner += f" ({mention(owner_id)})"
    lines.append(f"Owner: {owner}")
    if details.token_uri:
        lines.append(f"Metadata: <{details.token_uri}>")
    lines.append(f"View: <{asteroid_link(page_template, details.id)}>")
    return "\n".join(lines)


def format_asteroid_list(asteroid_ids: Sequence[int], total: int | None = None) -> str:
    """Render owned asteroid ids as a comma separated list."""
    if not asteroid_ids:
        return "No asteroids found."
    total = total if total is not None else len(asteroid_ids)
    listed = ", ".join(f"#{asteroid_id}" for asteroid_id in asteroid_ids)
    header = f"{total} asteroid{'s' if total != 1 else ''}"
    if total > len(asteroid_ids):
        header += f" (showing {len(asteroid_ids)})"
    return truncate(f"{header}: {listed}")


def format_chain_event(event: ChainEvent, page_template: str) -> str:
    link = asteroid_link(page_template, event.asteroid_id)
    tx_link = ETHERSCAN_TX_URL.format(tx_hash=event.tx_hash)
    if event.name == "Transfer":
        sender = event.args.get("from", "")
        receiver = event.args.get("to", "")
        if sender == ZERO_ADDRESS:
            action = f"was minted to `{short_address(receiver)}`"
        else:
            action = (
                f"moved from `{short_address(sender)}` to `{short_address(receiver)}`"
            )
    else:
        action = "was scanned"
    return f"Asteroid [#{event.asteroid_id}](<{link}>) {action} ([tx](<{tx_link}>))"


def truncate(text: str, limit: int = DISCORD_MESSAGE_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


def join_lines(lines: List[str]) -> str:
    return "\n".join(line for line in lines if line)


__all__ = [
    "mention",
    "short_address",
    "asteroid_link",
    "format_asteroid_details",
    "format_asteroid_list",
    "format_chain_event",
    "truncate",
    "join_lines",
    "ETHERSCAN_ADDRESS_URL",
]
