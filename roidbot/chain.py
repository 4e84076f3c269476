"""Read-only access to the Influence asteroid contracts through Infura."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from web3 import Web3
from web3.exceptions import ContractLogicError

from roidbot.config import Settings
from roidbot.store.db import check_event_name
from roidbot.utils.logging import get_logger

logger = get_logger(__name__)

INFURA_URL = "https://{network}.infura.io/v3/{project_id}"

ASTEROID_ABI: List[Dict[str, Any]] = [
    {
        "name": "ownerOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "name": "tokenURI",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "tokenOfOwnerByIndex",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "index", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "Transfer",
        "type": "event",
        "anonymous": False,
        "inputs": [
            {"name": "from", "type": "address", "indexed": True},
            {"name": "to", "type": "address", "indexed": True},
            {"name": "tokenId", "type": "uint256", "indexed": True},
        ],
    },
]

ASTEROID_SCANS_ABI: List[Dict[str, Any]] = [
    {
        "name": "AsteroidScanned",
        "type": "event",
        "anonymous": False,
        "inputs": [
            {"name": "asteroidId", "type": "uint256", "indexed": True},
            {"name": "bonuses", "type": "uint256", "indexed": False},
        ],
    },
]


class AsteroidNotFound(LookupError):
    """Raised when an asteroid id has no owner on chain."""


@dataclass
class AsteroidDetails:
    id: int
    owner: str
    token_uri: Optional[str] = None


@dataclass
class ChainEvent:
    name: str
    asteroid_id: int
    block_number: int
    tx_hash: str
    args: Dict[str, Any]


class AsteroidClient:
    """Query asteroid ownership and events.

    web3 calls block, so every public coroutine runs them in a worker thread.
    """

    def __init__(
        self,
        w3: Web3,
        asteroid_contract: str,
        scans_contract: Optional[str] = None,
    ) -> None:
        self.w3 = w3
        self.asteroids = w3.eth.contract(
            address=Web3.to_checksum_address(asteroid_contract),
            abi=ASTEROID_ABI,
        )
        self.scans = None
        if scans_contract:
            self.scans = w3.eth.contract(
                address=Web3.to_checksum_address(scans_contract),
                abi=ASTEROID_SCANS_ABI,
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["AsteroidClient"]:
        """Build a client on Infura, or return None without credentials."""
        if not settings.chain_enabled:
            return None
        url = INFURA_URL.format(
            network=settings.infura_network,
            project_id=settings.infura_project_id,
        )
        w3 = Web3(
            Web3.HTTPProvider(
                url,
                request_kwargs={"auth": ("", settings.infura_project_secret)},
            )
        )
        logger.info("infura_provider_ready", network=settings.infura_network)
        return cls(w3, settings.asteroid_contract, settings.asteroid_scans_contract)

    async def get_asteroid(self, asteroid_id: int) -> AsteroidDetails:
        return await asyncio.to_thread(self._get_asteroid, asteroid_id)

    async def get_owned_asteroids(self, address: str, limit: int = 50) -> List[int]:
        return await asyncio.to_thread(self._get_owned_asteroids, address, limit)

    async def count_owned_asteroids(self, address: str) -> int:
        owner = Web3.to_checksum_address(address)
        return await asyncio.to_thread(
            lambda: int(self.asteroids.functions.balanceOf(owner).call())
        )

    async def latest_block(self) -> int:
        return await asyncio.to_thread(lambda: int(self.w3.eth.block_number))

    async def get_events(
        self, event_name: str, from_block: int, to_block: int
    ) -> List[ChainEvent]:
        return await asyncio.to_thread(
            self._get_events, check_event_name(event_name), from_block, to_block
        )

    def _get_asteroid(self, asteroid_id: int) -> AsteroidDetails:
        functions = self.asteroids.functions
        try:
            owner = functions.ownerOf(asteroid_id).call()
        except ContractLogicError as exc:
            raise AsteroidNotFound(asteroid_id) from exc

        try:
            token_uri = functions.tokenURI(asteroid_id).call() or None
        except ContractLogicError:
            token_uri = None
        return AsteroidDetails(id=asteroid_id, owner=owner, token_uri=token_uri)

    def _get_owned_asteroids(self, address: str, limit: int) -> List[int]:
        owner = Web3.to_checksum_address(address)
        functions = self.asteroids.functions
        balance = int(functions.balanceOf(owner).call())
        return [
            int(functions.tokenOfOwnerByIndex(owner, index).call())
            for index in range(min(balance, limit))
        ]

    def _get_events(
        self, event_name: str, from_block: int, to_block: int
    ) -> List[ChainEvent]:
        contract = self.asteroids if event_name == "Transfer" else self.scans
        if contract is None:
            return []
        logs = getattr(contract.events, event_name).get_logs(
            from_block=from_block, to_block=to_block
        )
        events = []
        for log in logs:
            args = dict(log["args"])
            asteroid_id = args.get("tokenId", args.get("asteroidId"))
            events.append(
                ChainEvent(
                    name=event_name,
                    asteroid_id=int(asteroid_id),
                    block_number=int(log["blockNumber"]),
                    tx_hash=Web3.to_hex(log["transactionHash"]),
                    args=args,
                )
            )
        return events


__all__ = [
    "AsteroidClient",
    "AsteroidDetails",
    "AsteroidNotFound",
    "ChainEvent",
]
