"""High-level database operations."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, select

from .db import AddressBinding, ChannelEvents, check_event_name


class Repository:
    """CRUD utilities wrapping SQLModel sessions."""

    def __init__(self, session) -> None:
        self.session = session

    # Addresses

    async def get_address(self, discord_id: str) -> Optional[str]:
        result = await self.session.execute(
            select(AddressBinding).where(AddressBinding.discord_id == str(discord_id))
        )
        binding = result.scalar_one_or_none()
        return binding.address if binding else None

    async def get_discord_id(self, address: str) -> Optional[str]:
        binding = await self.session.get(AddressBinding, address)
        return binding.discord_id if binding else None

    async def set_address(self, discord_id: str, address: str) -> None:
        """Bind ``address`` to ``discord_id``, replacing any previous binding.

        A user holds at most one address, so an address the user verified
        earlier is released first.
        """
        discord_id = str(discord_id)
        await self.session.execute(
            delete(AddressBinding).where(
                AddressBinding.discord_id == discord_id,
                AddressBinding.address != address,
            )
        )
        await self.session.merge(AddressBinding(address=address, discord_id=discord_id))
        await self.session.commit()

    # Event channels

    async def list_event_channels(self, event_name: str) -> List[ChannelEvents]:
        """Return every channel with the flag for ``event_name`` switched on."""
        column = getattr(ChannelEvents, check_event_name(event_name))
        result = await self.session.execute(
            select(ChannelEvents).where(column == 1).order_by(ChannelEvents.channel)
        )
        return list(result.scalars().all())

    async def get_channel_events(self, channel: str) -> ChannelEvents:
        """Return the channel's flags, or an unsaved all-off default."""
        events = await self.session.get(ChannelEvents, str(channel))
        if events is None:
            return ChannelEvents(channel=str(channel), Transfer=0, AsteroidScanned=0)
        return events

    async def set_channel_events(self, events: ChannelEvents) -> None:
        await self.session.merge(
            ChannelEvents(
                channel=str(events.channel),
                Transfer=int(bool(events.Transfer)),
                AsteroidScanned=int(bool(events.AsteroidScanned)),
            )
        )
        await self.session.commit()

    async def remove_channel_events(self, channel: str) -> int:
        result = await self.session.execute(
            delete(ChannelEvents).where(ChannelEvents.channel == str(channel))
        )
        await self.session.commit()
        return result.rowcount
