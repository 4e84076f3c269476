"""Stand-ins for discord.py objects and the chain client."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Dict, List, Optional

from roidbot.chain import AsteroidDetails, AsteroidNotFound, ChainEvent


class DummyUser:
    def __init__(
        self,
        user_id: int,
        name: str = "someone",
        bot: bool = False,
        manage_channels: bool = False,
    ) -> None:
        self.id = user_id
        self.name = name
        self.display_name = name
        self.bot = bot
        self.guild_permissions = SimpleNamespace(manage_channels=manage_channels)
        self.sent: List[str] = []

    @property
    def mention(self) -> str:
        return f"<@{self.id}>"

    async def send(self, text: str, **kwargs) -> None:
        self.sent.append(text)


class DummyGuild:
    def __init__(self, members: Optional[List[DummyUser]] = None) -> None:
        self.id = 1
        self.members: Dict[str, DummyUser] = {m.name: m for m in members or []}

    def get_member_named(self, name: str) -> Optional[DummyUser]:
        return self.members.get(name)


class DummyMessage:
    _next_id = 1000

    def __init__(
        self,
        content: str,
        author: DummyUser,
        guild: Optional[DummyGuild] = None,
        channel_id: int = 555,
        mentions: Optional[List[DummyUser]] = None,
    ) -> None:
        DummyMessage._next_id += 1
        self.id = DummyMessage._next_id
        self.content = content
        self.author = author
        self.guild = guild
        self.channel = SimpleNamespace(id=channel_id)
        self.mentions = mentions or []
        self.replies: List[str] = []

    async def reply(self, text: str, **kwargs) -> None:
        self.replies.append(text)


class FakeChain:
    def __init__(
        self,
        owners: Optional[Dict[int, str]] = None,
        fail: bool = False,
    ) -> None:
        self.owners = owners or {}
        self.fail = fail
        self.block = 100
        self.events: Dict[str, List[ChainEvent]] = {}
        self.event_calls: List[tuple] = []

    async def get_asteroid(self, asteroid_id: int) -> AsteroidDetails:
        if self.fail:
            raise ConnectionError("provider down")
        owner = self.owners.get(asteroid_id)
        if owner is None:
            raise AsteroidNotFound(asteroid_id)
        return AsteroidDetails(
            id=asteroid_id,
            owner=owner,
            token_uri=f"https://meta.example/{asteroid_id}",
        )

    async def get_owned_asteroids(self, address: str, limit: int = 50) -> List[int]:
        if self.fail:
            raise ConnectionError("provider down")
        owned = sorted(i for i, owner in self.owners.items() if owner == address)
        return owned[:limit]

    async def count_owned_asteroids(self, address: str) -> int:
        return sum(1 for owner in self.owners.values() if owner == address)

    async def latest_block(self) -> int:
        if self.fail:
            raise ConnectionError("provider down")
        return self.block

    async def get_events(
        self, event_name: str, from_block: int, to_block: int
    ) -> List[ChainEvent]:
        self.event_calls.append((event_name, from_block, to_block))
        return self.events.get(event_name, [])
