"""
CampaignRegistry - owner of campaign records.

A campaign is registered once, with a window that starts now or later and a
non-zero reward token. Registration asks the escrow to pull the whole
allocation from the registrant; the request is sent exactly once and only
when every check has passed. Afterwards the only mutable field is the
remaining reward pool, which claims draw down.
"""

from typing import Dict, Iterable, List, Optional

from ido_rewards.campaigns.models import Campaign, CampaignStatus, PoolPair
from ido_rewards.escrow import Escrow
from ido_rewards.shared.addresses import (
    is_zero_address,
    normalize_address,
    require_address,
)
from ido_rewards.shared.exceptions import (
    AlreadyRegistered,
    CampaignNotFound,
    InvalidAllocation,
    InvalidToken,
    InvalidWindow,
    Overflow,
)
from ido_rewards.shared.fixed_point import MAX_UINT256
from ido_rewards.shared.logging import get_logger

_logger = get_logger(__name__)


class CampaignRegistry:
    """
    Holds Campaign records keyed by campaign id.

    Attributes:
        escrow: Vault receiving the deposit request on registration
    """

    def __init__(self, escrow: Escrow):
        self.escrow = escrow
        self._campaigns: Dict[str, Campaign] = {}

    def register(
        self,
        campaign_id: str,
        reward_token: str,
        pair,
        total_allocation: int,
        window_start: int,
        window_end: int,
        now: int,
        registrant: str,
    ) -> Campaign:
        """
        Register a campaign and request the escrow deposit.

        Args:
            campaign_id: Opaque unique id
            reward_token: Address of the reward token
            pair: PoolPair (or two addresses) of the rewarded pool
            total_allocation: Reward tokens to distribute (base units)
            window_start: Window start (unix seconds, >= now)
            window_end: Window end (unix seconds, > window_start)
            now: Current time
            registrant: Address funding the escrow

        Returns:
            Campaign: The stored campaign

        Raises:
            AlreadyRegistered: If campaign_id exists
            InvalidWindow: If the window starts before now or is empty
            InvalidToken: If reward_token is the zero address or malformed,
                or the pool pair is malformed
            InvalidAddress: If the registrant address is malformed
            InvalidAllocation: If total_allocation is not a positive uint256
        """
        campaign_id = str(campaign_id)
        context = {"campaign_id": campaign_id}

        if campaign_id in self._campaigns:
            raise AlreadyRegistered(
                f"Campaign {campaign_id} is already registered", context
            )
        if window_start < now or window_end <= window_start:
            raise InvalidWindow(
                f"Invalid window [{window_start}, {window_end}] at {now}",
                {**context, "window_start": window_start,
                 "window_end": window_end, "now": now},
            )
        try:
            reward_token = normalize_address(reward_token, "reward_token")
        except ValueError as e:
            raise InvalidToken(str(e), context) from e
        if is_zero_address(reward_token):
            raise InvalidToken("Reward token is the zero address", context)
        if (
            not isinstance(total_allocation, int)
            or isinstance(total_allocation, bool)
            or total_allocation <= 0
        ):
            raise InvalidAllocation(
                f"Total allocation must be a positive integer, "
                f"got {total_allocation!r}",
                context,
            )
        if total_allocation > MAX_UINT256:
            raise Overflow("Total allocation exceeds uint256", context)
        try:
            pool_pair = PoolPair.of(pair)
        except (TypeError, ValueError) as e:
            raise InvalidToken(f"Malformed pool pair: {e}", context) from e
        registrant = require_address(registrant, "registrant")

        campaign = Campaign(
            campaign_id=campaign_id,
            reward_token=reward_token,
            pair=pool_pair,
            total_allocation=total_allocation,
            reward_pool=total_allocation,
            window_start=window_start,
            window_end=window_end,
            registrant=registrant,
        )

        self.escrow.request_escrow_deposit(
            campaign.registrant, campaign.reward_token, total_allocation
        )
        self._campaigns[campaign_id] = campaign

        _logger.info(
            "Registered campaign %s: %s of %s over [%s, %s]",
            campaign_id,
            total_allocation,
            reward_token,
            window_start,
            window_end,
        )
        return campaign

    @staticmethod
    def matches(pair, campaign_pair) -> bool:
        """True iff both unordered pairs hold the same two assets."""
        return PoolPair.of(pair) == PoolPair.of(campaign_pair)

    def get(self, campaign_id: str) -> Optional[Campaign]:
        return self._campaigns.get(str(campaign_id))

    def require(self, campaign_id: str) -> Campaign:
        campaign = self.get(campaign_id)
        if campaign is None:
            raise CampaignNotFound(
                f"Campaign {campaign_id} is not registered",
                {"campaign_id": str(campaign_id)},
            )
        return campaign

    def status(self, campaign_id: str, now: int) -> CampaignStatus:
        return self.require(campaign_id).status(now)

    def campaigns(self) -> List[Campaign]:
        return list(self._campaigns.values())

    def load(self, campaigns: Iterable[Campaign]) -> None:
        """Replace the table with restored records (no escrow requests)."""
        self._campaigns = {c.campaign_id: c for c in campaigns}

    def __contains__(self, campaign_id) -> bool:
        return str(campaign_id) in self._campaigns

    def __len__(self) -> int:
        return len(self._campaigns)
