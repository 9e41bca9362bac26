"""
Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests.
"""

import pytest
from eth_utils import to_checksum_address

from ido_rewards.context import RewardsContext
from ido_rewards.escrow import RecordingEscrow

# Window used by every sample campaign: [T, T + 100]
T = 1764806400
WINDOW = 100

ALICE = to_checksum_address("0x" + "a1" * 20)
BOB = to_checksum_address("0x" + "b2" * 20)
CAROL = to_checksum_address("0x" + "c3" * 20)
REGISTRANT = to_checksum_address("0x" + "d4" * 20)
RUNTIME = to_checksum_address("0x" + "e5" * 20)
TOKEN0 = to_checksum_address("0x" + "11" * 20)
TOKEN1 = to_checksum_address("0x" + "22" * 20)
OTHER_TOKEN = to_checksum_address("0x" + "33" * 20)
REWARD_TOKEN = to_checksum_address("0xd533a949740bb3306d119cc777fa900ba034cd52")

PAIR = (TOKEN0, TOKEN1)
REVERSED_PAIR = (TOKEN1, TOKEN0)
CAMPAIGN_ID = "ido-1"


@pytest.fixture
def escrow() -> RecordingEscrow:
    return RecordingEscrow()


@pytest.fixture
def ctx(escrow) -> RewardsContext:
    """Empty context with a recording escrow."""
    return RewardsContext(escrow=escrow)


@pytest.fixture
def campaign(ctx):
    """Campaign of 1000 reward tokens over [T, T + 100], registered at T - 10."""
    return ctx.register_campaign(
        CAMPAIGN_ID,
        REWARD_TOKEN,
        PAIR,
        1000,
        T,
        T + WINDOW,
        T - 10,
        REGISTRANT,
    )


@pytest.fixture
def sample_events():
    """Event log exercising every event type."""
    return [
        {
            "type": "register",
            "campaign_id": CAMPAIGN_ID,
            "reward_token": REWARD_TOKEN,
            "pair": list(PAIR),
            "total_allocation": "1000",
            "window_start": T,
            "window_end": T + WINDOW,
            "timestamp": T - 10,
            "registrant": REGISTRANT,
        },
        {
            "type": "add",
            "user": ALICE,
            "campaign_id": CAMPAIGN_ID,
            "pair": list(REVERSED_PAIR),
            "amount": 100,
            "timestamp": T + 1,
        },
        {
            "type": "add",
            "user": BOB,
            "campaign_id": CAMPAIGN_ID,
            "pair": list(PAIR),
            "amount": 100,
            "timestamp": T + 1,
        },
        {
            "type": "add",
            "user": CAROL,
            "campaign_id": CAMPAIGN_ID,
            "pair": list(PAIR),
            "amount": 100,
            "timestamp": T + 200,
        },
        {
            "type": "claim",
            "user": ALICE,
            "campaign_id": CAMPAIGN_ID,
            "timestamp": T + 101,
        },
        {
            "type": "claim",
            "user": ALICE,
            "campaign_id": CAMPAIGN_ID,
            "timestamp": T + 102,
        },
    ]


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow-running")
