"""State shared by every command handler."""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from typing import Dict, Optional

from roidbot.chain import AsteroidClient
from roidbot.config import DEFAULT_PREFIX, Settings
from roidbot.store.db import Database

CHALLENGE_TEMPLATE = (
    "I am linking the address {address} to the Discord user {discord_id}. "
    "Nonce: {nonce}"
)


@dataclass
class PendingVerification:
    discord_id: str
    address: str
    challenge: str


class VerificationSessions:
    """In-memory pending verifications keyed by Discord user id."""

    def __init__(self) -> None:
        self._pending: Dict[str, PendingVerification] = {}

    def start(self, discord_id: str | int, address: str) -> PendingVerification:
        discord_id = str(discord_id)
        challenge = CHALLENGE_TEMPLATE.format(
            address=address,
            discord_id=discord_id,
            nonce=secrets.token_hex(8),
        )
        session = PendingVerification(discord_id, address, challenge)
        self._pending[discord_id] = session
        return session

    def get(self, discord_id: str | int) -> Optional[PendingVerification]:
        return self._pending.get(str(discord_id))

    def pop(self, discord_id: str | int) -> Optional[PendingVerification]:
        return self._pending.pop(str(discord_id), None)

    def __contains__(self, discord_id: object) -> bool:
        return str(discord_id) in self._pending

    def __len__(self) -> int:
        return len(self._pending)


@dataclass
class HandlerContext:
    db: Database
    chain: Optional[AsteroidClient] = None
    prefix: str = DEFAULT_PREFIX
    test_user: Optional[str] = None
    verification_link: Optional[str] = None
    asteroid_url: str = "https://game.influenceth.io/asteroids/{id}"
    sessions: VerificationSessions = field(default_factory=VerificationSessions)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        db: Database,
        chain: Optional[AsteroidClient],
    ) -> "HandlerContext":
        return cls(
            db=db,
            chain=chain,
            prefix=settings.prefix,
            test_user=settings.test_user,
            verification_link=settings.verification_link,
            asteroid_url=settings.asteroid_url,
        )
