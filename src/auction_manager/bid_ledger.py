"""Bid recording and leader computation for the active round."""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from src.auction_manager.auction_state import Bid, OfferedItem, Participant
from src.auction_manager.config import MIN_BID_INCREMENT
from src.auction_manager.errors import ValidationError

logger = logging.getLogger(__name__)


class BidLedger:
    """Append-only list of bids for one round.

    The opening value (the item's dynamic value) is the minimum bid until a
    leader exists; after that every bid must beat the leader by
    ``MIN_BID_INCREMENT``.
    """

    def __init__(self, opening_value: float):
        self.opening_value = opening_value
        self._bids: List[Bid] = []

    def __len__(self) -> int:
        return len(self._bids)

    @property
    def is_empty(self) -> bool:
        return not self._bids

    def minimum_bid(self) -> float:
        """Smallest amount the next bid may offer."""
        leader = self.leader()
        if leader is not None:
            return leader.amount + MIN_BID_INCREMENT
        return self.opening_value

    def submit(self, participant: Participant, amount: float) -> Bid:
        """Validate and record a bid.

        Raises:
            ValidationError: If the amount is not a finite number, is below
                the minimum bid or is above the participant's budget. The
                ledger is not touched.
        """
        if not math.isfinite(amount):
            raise ValidationError(f"Bid must be a number, got {amount}")

        minimum = self.minimum_bid()
        if amount < minimum:
            raise ValidationError(f"Bid must be at least {minimum:.1f}")

        if amount > participant.budget:
            raise ValidationError(
                f"{participant.name} doesn't have enough budget "
                f"({participant.budget:.1f} available)"
            )

        bid = Bid.create(participant.participant_id, participant.name, amount)
        self._bids.append(bid)
        logger.debug("Recorded bid %.1f from %s", amount, participant.name)
        return bid

    def leader(self) -> Optional[Bid]:
        """Highest bid so far; the earliest bid reaching the maximum wins ties."""
        best = None
        for bid in self._bids:
            if best is None or bid.amount > best.amount:
                best = bid
        return best

    def history(self, descending: bool = True) -> List[Bid]:
        """Bids for display.

        ``descending=True`` sorts by amount (stable, so equal amounts keep
        submission order); otherwise bids come back in submission order.
        """
        if not descending:
            return list(self._bids)
        return sorted(self._bids, key=lambda b: b.amount, reverse=True)

    def clear(self):
        self._bids.clear()


@dataclass
class Round:
    """Bidding lifecycle for the item currently offered."""

    item: OfferedItem
    ledger: BidLedger = field(init=False)

    def __post_init__(self):
        self.ledger = BidLedger(self.item.dynamic_value)
