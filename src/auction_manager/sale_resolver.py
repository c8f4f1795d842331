"""Sale resolution - turns the leading bid into a purchase."""

import logging
from dataclasses import dataclass

from src.auction_manager.auction_state import GameState, Item
from src.auction_manager.bid_ledger import Round
from src.auction_manager.errors import InsufficientFundsError, NoBidsError

logger = logging.getLogger(__name__)


@dataclass
class Sale:
    """Record of a completed sale."""

    buyer_id: int
    buyer_name: str
    item: Item
    amount: float
    item_index: int


class SaleResolver:
    """Finalizes a round against the buyer's live budget.

    The resolver never clears the round: the caller does that only after a
    successful resolve, so a failed sale can be retried or cancelled.
    """

    def __init__(self, game_state: GameState):
        self.game_state = game_state

    def resolve(self, auction_round: Round) -> Sale:
        """Sell the round's item to the leading bidder.

        Raises:
            NoBidsError: If nobody has bid.
            NotFoundError: If the leading bidder has since been removed.
            InsufficientFundsError: If the buyer's current budget no longer
                covers the winning bid.
        """
        leader = auction_round.ledger.leader()
        if leader is None:
            raise NoBidsError("No bids placed yet")

        buyer = self.game_state.find_participant(leader.participant_id)

        # Budget is re-read here; it may have changed since the bid was placed.
        if buyer.budget < leader.amount:
            raise InsufficientFundsError(
                f"{buyer.name} no longer has enough budget "
                f"({buyer.budget:.1f} < {leader.amount:.1f})"
            )

        offered = auction_round.item
        item = Item(
            name=offered.name,
            position=offered.position,
            tier=offered.tier,
            price=leader.amount,
        )

        buyer.budget -= leader.amount
        index = buyer.add_item(item)

        logger.info(
            "SOLD %s (%s) to %s for %.1f",
            item.name,
            item.position,
            buyer.name,
            leader.amount,
        )

        return Sale(
            buyer_id=buyer.participant_id,
            buyer_name=buyer.name,
            item=item,
            amount=leader.amount,
            item_index=index,
        )
