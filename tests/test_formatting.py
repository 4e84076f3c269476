from roidbot.chain import AsteroidDetails, ChainEvent
from roidbot.utils.formatting import (
    format_asteroid_details,
    format_asteroid_list,
    format_chain_event,
    short_address,
    truncate,
)

ZERO = "0x0000000000000000000000000000000000000000"
ALICE = "0x1111111111111111111111111111111111111111"


def test_short_address():
    assert short_address(ALICE) == "0x1111…1111"
    assert short_address("0x12") == "0x12"


def test_format_asteroid_details_without_owner_binding():
    details = AsteroidDetails(id=1, owner=ALICE)
    output = format_asteroid_details(details, None, "https://x/{id}")
    assert "<@" not in output
    assert "Metadata" not in output
    assert "<https://x/1>" in output


def test_format_asteroid_list_counts():
    assert format_asteroid_list([]) == "No asteroids found."
    assert format_asteroid_list([7]) == "1 asteroid: #7"
    assert format_asteroid_list([1, 2], total=60) == "60 asteroids (showing 2): #1, #2"


def test_format_chain_event_mint_and_scan():
    mint = ChainEvent(
        name="Transfer",
        asteroid_id=5,
        block_number=1,
        tx_hash="0xfeed",
        args={"from": ZERO, "to": ALICE, "tokenId": 5},
    )
    scan = ChainEvent(
        name="AsteroidScanned",
        asteroid_id=6,
        block_number=1,
        tx_hash="0xbeef",
        args={"asteroidId": 6, "bonuses": 0},
    )
    assert "was minted to `0x1111…1111`" in format_chain_event(mint, "https://x/{id}")
    assert "was scanned" in format_chain_event(scan, "https://x/{id}")
    assert "https://etherscan.io/tx/0xbeef" in format_chain_event(scan, "{id}")


def test_truncate():
    assert truncate("abc", limit=5) == "abc"
    assert truncate("abcdef", limit=4) == "abc…"
