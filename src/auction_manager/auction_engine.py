"""Auction engine - orchestrates rounds, bids, sales and squads."""

import logging
import math
from typing import Callable, Dict, List, Optional, Tuple

from src.auction_manager.auction_state import (
    Bid,
    GameState,
    Item,
    OfferedItem,
    Participant,
)
from src.auction_manager.bid_ledger import Round
from src.auction_manager.config import DEFAULT_BUDGET, RESALE_RATE
from src.auction_manager.errors import AuctionError, ValidationError
from src.auction_manager.roster_assigner import RosterAssigner
from src.auction_manager.sale_resolver import Sale, SaleResolver
from src.auction_manager.turn_scheduler import Clock, ManualClock, TurnScheduler

logger = logging.getLogger(__name__)

Listener = Callable[[Dict], None]


class AuctionEngine:
    """Main controller for the auction.

    Owns the GameState and composes BidLedger (via the active Round),
    TurnScheduler, SaleResolver and RosterAssigner around one offered item at
    a time. Item supply and persistence are injected ports:

    * ``item_supply.offer(item_filter, exclude) -> (OfferedItem, remaining)``
    * ``persistence.load() -> Optional[GameState]`` and ``persistence.save(state)``

    Pass an ``AsyncioClock`` for a live countdown; the default ``ManualClock``
    only ticks when driven explicitly.
    """

    def __init__(
        self,
        item_supply=None,
        persistence=None,
        clock: Optional[Clock] = None,
        game_state: Optional[GameState] = None,
    ):
        self.item_supply = item_supply
        self.persistence = persistence
        self.roster = RosterAssigner()
        self.scheduler = TurnScheduler(
            clock or ManualClock(),
            on_advance=self._on_turn_advanced,
            on_tick=self._emit,
        )
        self.current_round: Optional[Round] = None
        self.shown_items: List[str] = []
        self.remaining_items: Optional[int] = None
        self._listeners: List[Listener] = []

        if game_state is None and persistence is not None:
            game_state = persistence.load()
        self.game_state = game_state or GameState()

    # ------------------------------------------------------------------
    # Participants
    # ------------------------------------------------------------------

    @property
    def participants(self) -> List[Participant]:
        return self.game_state.participants

    def get_participant(self, participant_id: int) -> Participant:
        return self.game_state.find_participant(participant_id)

    def register_participant(
        self, name: str, budget: Optional[float] = None
    ) -> Participant:
        """Add a manager to the game.

        Raises:
            ValidationError: Empty name, duplicate name (case-insensitive) or a
                budget that is negative or not a finite number.
        """
        name = (name or "").strip()
        if not name:
            raise self._rejected(ValidationError("Please enter a player name"))
        if self.game_state.find_by_name(name) is not None:
            raise self._rejected(
                ValidationError(f"A player named '{name}' already exists")
            )

        budget = DEFAULT_BUDGET if budget is None else float(budget)
        if not math.isfinite(budget) or budget < 0:
            raise self._rejected(
                ValidationError("Budget must be a non-negative number")
            )

        participant = Participant(
            participant_id=self.game_state.next_participant_id,
            name=name,
            budget=budget,
        )
        self.game_state.next_participant_id += 1
        self.game_state.participants.append(participant)

        self._sync_scheduler()

        logger.info(
            "Registered %s (id %d) with budget %.1f",
            name,
            participant.participant_id,
            budget,
        )
        self._commit()
        return participant

    def deregister_participant(self, participant_id: int) -> Participant:
        """Remove a manager and everything they own. Irrecoverable."""
        participant = self._find(participant_id)
        index = self.participants.index(participant)
        del self.game_state.participants[index]
        self.scheduler.set_participant_count(len(self.participants), removed_index=index)

        logger.info("Removed %s from the game", participant.name)
        self._commit()
        return participant

    # ------------------------------------------------------------------
    # Rounds
    # ------------------------------------------------------------------

    def offer_next_item(self, item_filter=None) -> OfferedItem:
        """Draw an unseen item from the supply and open a round for it.

        Raises:
            SupplyExhaustedError: Nothing matches the filter; state unchanged.
        """
        if self.item_supply is None:
            raise RuntimeError("No item supply configured")

        try:
            item, remaining = self.item_supply.offer(item_filter, self.shown_items)
        except AuctionError as e:
            raise self._rejected(e)

        self.shown_items.append(item.name)
        self.remaining_items = remaining - 1
        self.open_round(item)
        return item

    def open_round(self, item: OfferedItem) -> Round:
        """Start bidding on an item. Any round still open is abandoned."""
        if self.current_round is not None:
            logger.info(
                "Abandoning round for %s without a sale", self.current_round.item.name
            )

        self.current_round = Round(item=item)
        self.scheduler.open(len(self.participants))

        logger.info(
            "Round opened: %s (%s, tier %s) starting at %.1f",
            item.name,
            item.position,
            item.tier,
            item.dynamic_value,
        )
        self._emit()
        return self.current_round

    def current_participant(self) -> Optional[Participant]:
        """The participant whose turn it is, None when no round is running."""
        if self.current_round is None or self.scheduler.is_idle:
            return None
        return self.participants[self.scheduler.current_index]

    def bid_window(self) -> Tuple[float, float]:
        """(minimum bid, current participant's budget) for the bid control."""
        auction_round = self._require_round()
        participant = self.current_participant()
        maximum = participant.budget if participant is not None else 0.0
        return auction_round.ledger.minimum_bid(), maximum

    def place_bid(self, amount: float, participant_id: Optional[int] = None) -> Bid:
        """Bid for the participant on the clock, then pass the turn on.

        Args:
            amount: Offered price.
            participant_id: Optional check that the caller is the participant
                whose turn it is.

        Raises:
            ValidationError: No open round, nobody registered, wrong turn,
                bid below the minimum or above the budget. The turn stays with
                the same participant.
        """
        self._require_round()
        participant = self.current_participant()
        if participant is None:
            raise self._rejected(ValidationError("No participants registered"))
        if participant_id is not None and participant_id != participant.participant_id:
            raise self._rejected(
                ValidationError(
                    f"Not participant {participant_id}'s turn "
                    f"(current: {participant.name})"
                )
            )

        try:
            bid = self.current_round.ledger.submit(participant, amount)
        except ValidationError as e:
            raise self._rejected(e)

        logger.info(
            "%s bids %.1f on %s", participant.name, amount, self.current_round.item.name
        )
        self.scheduler.advance()
        self._emit()
        return bid

    def pass_turn(self):
        """Current participant passes; the turn moves on."""
        self._require_round()
        self.scheduler.advance()
        self._emit()

    def pause(self):
        self.scheduler.pause()
        self._emit()

    def resume(self):
        self.scheduler.resume()
        self._emit()

    def toggle_pause(self) -> bool:
        paused = self.scheduler.toggle_pause()
        logger.info("Auction %s", "paused" if paused else "resumed")
        self._emit()
        return paused

    def tick(self):
        """Inject one elapsed time unit (same path the clock uses)."""
        self.scheduler.tick()

    def sell_now(self) -> Sale:
        """Sell the current item to the leading bidder and close the round.

        Raises:
            ValidationError: No item is up for auction.
            NoBidsError, NotFoundError, InsufficientFundsError: From the
                resolver; the round stays open for a retry or cancel.
        """
        auction_round = self._require_round()
        try:
            sale = SaleResolver(self.game_state).resolve(auction_round)
        except AuctionError as e:
            raise self._rejected(e)

        self._close_round()
        self._commit()
        return sale

    def cancel_round(self):
        """Close the current round without a sale."""
        if self.current_round is None:
            return
        logger.info("Round for %s cancelled", self.current_round.item.name)
        self._close_round()
        self._emit()

    # ------------------------------------------------------------------
    # Squads
    # ------------------------------------------------------------------

    def move(self, participant_id: int, item_index: int, target_slot: str):
        """Place an inventory item into a slot (drag-and-drop command)."""
        participant = self._find(participant_id)
        try:
            self.roster.assign(participant, item_index, target_slot)
        except AuctionError as e:
            raise self._rejected(e)
        self._commit()

    def remove_from_roster(self, participant_id: int, slot: str):
        participant = self._find(participant_id)
        try:
            self.roster.remove(participant, slot)
        except AuctionError as e:
            raise self._rejected(e)
        self._commit()

    def autofill(self, participant_id: int, item_index: int) -> str:
        """Place an item into its first empty default slot."""
        participant = self._find(participant_id)
        try:
            slot = self.roster.autofill(participant, item_index)
        except AuctionError as e:
            raise self._rejected(e)
        self._commit()
        return slot

    def bench(
        self, participant_id: int, active_slot: Optional[str] = None
    ) -> List[Tuple[int, Item]]:
        return self.roster.bench_items(self._find(participant_id), active_slot)

    def sell_item(self, participant_id: int, item_index: int) -> float:
        """Quick-sell an owned item back to the market.

        The participant is credited RESALE_RATE of the price they paid, and
        roster indices are compacted.

        Returns:
            The amount credited.
        """
        participant = self._find(participant_id)
        try:
            item = participant.remove_item(item_index)
        except AuctionError as e:
            raise self._rejected(e)

        resale_value = round(item.price * RESALE_RATE, 1)
        participant.budget += resale_value
        self.roster.on_item_removed(participant, item_index)

        logger.info(
            "%s sold %s back for %.1f (paid %.1f)",
            participant.name,
            item.name,
            resale_value,
            item.price,
        )
        self._commit()
        return resale_value

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def reload(self):
        """Throw away in-memory participants and re-read persisted state.

        No merge is attempted: whatever was saved last wins. The active round,
        if any, stays open.
        """
        if self.persistence is None:
            raise RuntimeError("No persistence configured")

        self.game_state = self.persistence.load() or GameState()
        self._sync_scheduler()
        logger.info("Reloaded %d participants", len(self.participants))
        self._emit()

    def reset(self):
        """Clear the whole session: round, participants and shown items."""
        self._close_round()
        self.shown_items = []
        self.remaining_items = None
        self.game_state = GameState()
        logger.info("Session reset")
        self._commit()

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener):
        """Call listener with a fresh snapshot after every state change."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def snapshot(self) -> Dict:
        """Everything a renderer needs, as plain dicts and lists."""
        return {
            "participants": [self._participant_view(p) for p in self.participants],
            "round": self._round_view(),
            "rosters": {
                p.participant_id: {
                    slot: (_item_view(item) if item else None)
                    for slot, item in self.roster.board(p).items()
                }
                for p in self.participants
            },
            "items_shown": len(self.shown_items),
            "items_remaining": self.remaining_items,
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _find(self, participant_id: int) -> Participant:
        try:
            return self.game_state.find_participant(participant_id)
        except AuctionError as e:
            raise self._rejected(e)

    def _sync_scheduler(self):
        # A round opened with nobody registered starts ticking once someone joins.
        if self.current_round is not None and self.scheduler.is_idle:
            self.scheduler.open(len(self.participants))
        else:
            self.scheduler.set_participant_count(len(self.participants))

    def _require_round(self) -> Round:
        if self.current_round is None:
            raise self._rejected(
                ValidationError("No item is currently up for auction")
            )
        return self.current_round

    def _close_round(self):
        self.scheduler.close()
        if self.current_round is not None:
            self.current_round.ledger.clear()
        self.current_round = None

    def _on_turn_advanced(self, index: int):
        if index < len(self.participants):
            logger.debug("%s is on the clock", self.participants[index].name)

    def _rejected(self, error: AuctionError) -> AuctionError:
        logger.warning("Rejected: %s", error)
        return error

    def _commit(self):
        if self.persistence is not None:
            self.persistence.save(self.game_state)
        self._emit()

    def _emit(self):
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def _participant_view(self, participant: Participant) -> Dict:
        return {
            "participant_id": participant.participant_id,
            "name": participant.name,
            "budget": participant.budget,
            "items": [
                dict(_item_view(item), index=i, slot=participant.slot_of(i))
                for i, item in enumerate(participant.inventory)
            ],
        }

    def _round_view(self) -> Optional[Dict]:
        auction_round = self.current_round
        if auction_round is None:
            return None

        leader = auction_round.ledger.leader()
        bidder = self.current_participant()
        return {
            "item": {
                "name": auction_round.item.name,
                "position": auction_round.item.position,
                "tier": auction_round.item.tier,
                "dynamic_value": auction_round.item.dynamic_value,
                "form": auction_round.item.form,
                "details": dict(auction_round.item.details),
            },
            "current_bid": (
                leader.amount if leader else auction_round.item.dynamic_value
            ),
            "leader": leader.participant_name if leader else None,
            "minimum_bid": auction_round.ledger.minimum_bid(),
            "history": [
                {"participant_name": bid.participant_name, "amount": bid.amount}
                for bid in auction_round.ledger.history()
            ],
            "current_participant": (
                {
                    "participant_id": bidder.participant_id,
                    "name": bidder.name,
                    "budget": bidder.budget,
                }
                if bidder
                else None
            ),
            "remaining_seconds": self.scheduler.remaining,
            "turn_seconds": self.scheduler.turn_seconds,
            "paused": self.scheduler.is_paused,
            "can_sell": leader is not None,
        }


def _item_view(item: Item) -> Dict:
    return {
        "name": item.name,
        "position": item.position,
        "tier": item.tier,
        "price": item.price,
    }
