"""Run a live auction from the terminal.

Usage:
    python -m src.auction_manager.run_auction [players_file] [state_dir]

Type ``help`` at the prompt for the command list. The turn countdown runs in
real time on the asyncio event loop while the prompt waits for input.
"""

import asyncio
import logging
import sys
import threading
from pathlib import Path
from typing import Optional

from src.auction_manager.auction_engine import AuctionEngine
from src.auction_manager.errors import AuctionError
from src.auction_manager.state_persistence import StatePersistence
from src.auction_manager.turn_scheduler import AsyncioClock, Clock
from src.item_supply.catalog import ItemFilter, PlayerCatalog
from src.logging_config import setup_logging

logger = logging.getLogger(__name__)

HELP = """Commands:
  add <name> [budget]           register a participant
  drop <id>                     remove a participant
  next [GK|DEF|MID|FWD] [tier]  put the next player up for auction
  bid <amount>                  bid for whoever is on the clock
  pass                          pass the turn
  pause                         pause / resume the countdown
  sell                          sell to the highest bidder
  cancel                        close the round without a sale
  move <id> <index> <slot>      put an owned player into a squad slot
  bench <id> <slot>             take a slot's player back to the bench
  auto <id> <index>             put an owned player into their default slot
  quicksell <id> <index>        sell an owned player back for 80% of the price paid
  reload                        re-read the saved game
  reset                         clear the whole session
  status                        show participants and the current round
  quit"""


def build_engine(
    players_file: Optional[Path] = None,
    state_dir: Optional[Path] = None,
    clock: Optional[Clock] = None,
) -> AuctionEngine:
    """Wire the catalog, JSON persistence and a clock into an engine."""
    catalog = PlayerCatalog.from_file(players_file)
    persistence = StatePersistence(storage_dir=state_dir)
    return AuctionEngine(item_supply=catalog, persistence=persistence, clock=clock)


def format_status(engine: AuctionEngine) -> str:
    snapshot = engine.snapshot()
    lines = []
    for p in snapshot["participants"]:
        lines.append(
            f"[{p['participant_id']}] {p['name']}: {p['budget']:.1f}M, "
            f"{len(p['items'])} players"
        )
        for item in p["items"]:
            where = item["slot"] or "bench"
            lines.append(
                f"    {item['index']}: {item['name']} ({item['position']}) "
                f"{item['price']:.1f}M [{where}]"
            )
    if not lines:
        lines.append("No participants yet")

    current = snapshot["round"]
    if current:
        item = current["item"]
        lines.append(
            f"Up for auction: {item['name']} ({item['position']}, tier {item['tier']}) "
            f"value {item['dynamic_value']}M, form {item['form']}"
        )
        leader = current["leader"] or "Market Value"
        lines.append(f"Current bid: {current['current_bid']:.1f}M by {leader}")
        bidder = current["current_participant"]
        if bidder:
            lines.append(
                f"On the clock: {bidder['name']} "
                f"({current['remaining_seconds']}s{', paused' if current['paused'] else ''})"
            )
    return "\n".join(lines)


def execute(engine: AuctionEngine, line: str) -> str:
    """Run one command line against the engine and return the reply text.

    Auction errors are reported back as text; the engine state is unchanged
    when one occurs.
    """
    parts = line.split()
    if not parts:
        return ""
    command, args = parts[0].lower(), parts[1:]

    try:
        if command == "help":
            return HELP
        if command == "add":
            budget = float(args[1]) if len(args) > 1 else None
            p = engine.register_participant(args[0] if args else "", budget)
            return f"Added {p.name} (id {p.participant_id}) with {p.budget:.1f}M"
        if command == "drop":
            p = engine.deregister_participant(int(args[0]))
            return f"Removed {p.name}"
        if command == "next":
            item_filter = ItemFilter(
                position=args[0] if args else "all",
                tier=args[1] if len(args) > 1 else "all",
            )
            item = engine.offer_next_item(item_filter)
            return f"Now up: {item.name} ({item.position}) from {item.dynamic_value}M"
        if command == "bid":
            bid = engine.place_bid(float(args[0]))
            return f"{bid.participant_name} bids {bid.amount:.1f}M"
        if command == "pass":
            engine.pass_turn()
            return "Passed"
        if command == "pause":
            return "Paused" if engine.toggle_pause() else "Resumed"
        if command == "sell":
            sale = engine.sell_now()
            return (
                f"SOLD! {sale.item.name} sold to {sale.buyer_name} "
                f"for {sale.amount:.1f}M"
            )
        if command == "cancel":
            engine.cancel_round()
            return "Round cancelled"
        if command == "move":
            engine.move(int(args[0]), int(args[1]), args[2].upper())
            return "Moved"
        if command == "bench":
            engine.remove_from_roster(int(args[0]), args[1].upper())
            return "Benched"
        if command == "auto":
            slot = engine.autofill(int(args[0]), int(args[1]))
            return f"Placed in {slot}"
        if command == "quicksell":
            value = engine.sell_item(int(args[0]), int(args[1]))
            return f"Sold back for {value:.1f}M"
        if command == "reload":
            engine.reload()
            return "Reloaded"
        if command == "reset":
            engine.reset()
            return "Session reset"
        if command == "status":
            return format_status(engine)
    except AuctionError as e:
        return f"Error: {e}"
    except (IndexError, ValueError):
        return f"Bad arguments for '{command}'. Type 'help'."

    return f"Unknown command '{command}'. Type 'help'."


def start_reader(loop: asyncio.AbstractEventLoop, lines: asyncio.Queue):
    """Feed stdin lines into the queue from a daemon thread; None marks EOF.

    A daemon thread does not hold up interpreter shutdown while it is blocked
    in ``input()``, so Ctrl-C exits at once.
    """

    def _read():
        while True:
            try:
                line = input()
            except EOFError:
                line = None
            loop.call_soon_threadsafe(lines.put_nowait, line)
            if line is None:
                return

    threading.Thread(target=_read, name="stdin-reader", daemon=True).start()


async def run(players_file: Optional[Path] = None, state_dir: Optional[Path] = None):
    loop = asyncio.get_running_loop()
    engine = build_engine(players_file, state_dir, clock=AsyncioClock(loop))

    on_clock = {"id": None}

    def announce_turn(snapshot):
        current = snapshot["round"]
        bidder = current["current_participant"] if current else None
        bidder_id = bidder["participant_id"] if bidder else None
        if bidder_id != on_clock["id"]:
            on_clock["id"] = bidder_id
            if bidder:
                print(f"\n>> {bidder['name']} is on the clock ({bidder['budget']:.1f}M)")

    engine.subscribe(announce_turn)
    print(HELP)

    lines: asyncio.Queue = asyncio.Queue()
    start_reader(loop, lines)

    while True:
        print("> ", end="", flush=True)
        line = await lines.get()
        if line is None or line.strip().lower() in ("quit", "exit"):
            engine.cancel_round()
            break
        reply = execute(engine, line)
        if reply:
            print(reply)


if __name__ == "__main__":
    setup_logging()

    players_file = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    state_dir = Path(sys.argv[2]) if len(sys.argv) > 2 else None

    try:
        asyncio.run(run(players_file, state_dir))
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.exception("Auction crashed")
        sys.exit(1)
