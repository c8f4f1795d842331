"""Roster slot assignment and index maintenance."""

import logging
from typing import Dict, List, Optional, Tuple

from src.auction_manager.auction_state import Item, Participant
from src.auction_manager.errors import NoEmptySlotError
from src.auction_manager.positions import (
    SLOTS,
    autofill_candidates,
    is_browse_compatible,
    slot_position,
)

logger = logging.getLogger(__name__)


class RosterAssigner:
    """Maintains each participant's slot -> inventory-index mapping.

    Invariant: every roster value points at an existing inventory entry and
    no inventory index is held by two slots.
    """

    def assign(self, participant: Participant, item_index: int, target_slot: str):
        """Place an inventory item into a slot.

        Move semantics: if the item already sits in another slot that slot is
        cleared first. Whoever held ``target_slot`` goes back to the bench.
        No position check is made, so a manual drop can force any position.
        """
        slot_position(target_slot)
        item = participant.get_item(item_index)

        existing_slot = participant.slot_of(item_index)
        if existing_slot is not None:
            del participant.roster[existing_slot]

        evicted = participant.roster.get(target_slot)
        participant.roster[target_slot] = item_index

        logger.info(
            "%s: %s -> %s%s",
            participant.name,
            item.name,
            target_slot,
            f" (evicted index {evicted})" if evicted is not None else "",
        )

    def remove(self, participant: Participant, slot: str):
        """Clear a slot; no-op when it is already empty."""
        slot_position(slot)
        if participant.roster.pop(slot, None) is not None:
            logger.info("%s: cleared slot %s", participant.name, slot)

    def autofill(self, participant: Participant, item_index: int) -> str:
        """Put an item into the first empty slot it strictly qualifies for.

        Returns:
            The slot the item was placed in.

        Raises:
            NoEmptySlotError: If every candidate slot is occupied (or the
                position has none). Nothing is changed.
        """
        item = participant.get_item(item_index)
        for slot in autofill_candidates(item.position):
            if slot not in participant.roster:
                self.assign(participant, item_index, slot)
                return slot

        raise NoEmptySlotError(
            f"No empty default slot for {item.position}. "
            "Drag to force position."
        )

    def on_item_removed(self, participant: Participant, removed_index: int):
        """Re-point roster entries after the inventory item at removed_index is gone."""
        for slot in list(participant.roster):
            index = participant.roster[slot]
            if index == removed_index:
                del participant.roster[slot]
            elif index > removed_index:
                participant.roster[slot] = index - 1

    def bench_items(
        self, participant: Participant, active_slot: Optional[str] = None
    ) -> List[Tuple[int, Item]]:
        """Unassigned inventory entries as (index, item).

        With a slot selected only players eligible under the browse policy
        are listed.
        """
        required = slot_position(active_slot) if active_slot else None
        bench = []
        for index in participant.unassigned_indices():
            item = participant.inventory[index]
            if required is None or is_browse_compatible(item.position, required):
                bench.append((index, item))
        return bench

    def repair(self, participant: Participant) -> List[str]:
        """Drop roster entries that break the invariant.

        Used on state read back from disk, which another front end or a hand
        edit may have left inconsistent. When two slots share an index the
        first one keeps it.

        Returns:
            The problems found, empty if the roster was already valid.
        """
        ok, errors = self.validate(participant)
        if ok:
            return []

        kept: Dict[str, int] = {}
        for slot, index in participant.roster.items():
            if (
                slot in SLOTS
                and 0 <= index < len(participant.inventory)
                and index not in kept.values()
            ):
                kept[slot] = index
        participant.roster = kept

        logger.warning(
            "%s: dropped invalid roster entries: %s",
            participant.name,
            "; ".join(errors),
        )
        return errors

    def board(self, participant: Participant) -> Dict[str, Optional[Item]]:
        """Every formation slot mapped to its item, or None when empty."""
        return {
            slot: (
                participant.inventory[participant.roster[slot]]
                if slot in participant.roster
                else None
            )
            for slot in SLOTS
        }

    def validate(self, participant: Participant) -> Tuple[bool, List[str]]:
        """
        Check the roster invariant.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []
        seen: Dict[int, str] = {}

        for slot, index in participant.roster.items():
            if slot not in SLOTS:
                errors.append(f"Unknown slot {slot}")
            if not 0 <= index < len(participant.inventory):
                errors.append(f"Slot {slot} points at missing index {index}")
            if index in seen:
                errors.append(f"Index {index} held by both {seen[index]} and {slot}")
            seen[index] = slot

        return (len(errors) == 0, errors)
