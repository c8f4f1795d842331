"""Tests for the terminal front end's command handling."""

import asyncio
import json

import pytest

from src.auction_manager.run_auction import (
    HELP,
    build_engine,
    execute,
    format_status,
    start_reader,
)
from src.auction_manager.turn_scheduler import ManualClock


@pytest.fixture
def session(engine):
    execute(engine, "add Alice 100")
    execute(engine, "add Bob 50")
    return engine


class TestExecute:
    def test_blank_line(self, engine):
        assert execute(engine, "   ") == ""

    def test_help(self, engine):
        assert execute(engine, "help") == HELP

    def test_add(self, engine):
        assert execute(engine, "add Alice 80") == "Added Alice (id 0) with 80.0M"
        assert engine.participants[0].budget == 80

    def test_add_default_budget(self, engine):
        execute(engine, "add Alice")
        assert engine.participants[0].budget == 100

    def test_add_without_name(self, engine):
        assert execute(engine, "add") == "Error: Please enter a player name"

    def test_bad_number(self, engine):
        assert execute(engine, "add Alice lots").startswith("Bad arguments for 'add'")

    def test_unknown_command(self, engine):
        assert execute(engine, "shout") == "Unknown command 'shout'. Type 'help'."

    def test_auction_flow(self, session):
        reply = execute(session, "next GK")
        assert reply.startswith("Now up: Alisson Becker (GK)")

        minimum = session.current_round.ledger.minimum_bid()
        assert execute(session, f"bid {minimum}") == f"Alice bids {minimum:.1f}M"
        assert execute(session, "pass") == "Passed"
        assert execute(session, "sell") == (
            f"SOLD! Alisson Becker sold to Alice for {minimum:.1f}M"
        )
        assert execute(session, "auto 0 0") == "Placed in GK"
        assert execute(session, "bench 0 GK") == "Benched"
        assert execute(session, "move 0 0 gk") == "Moved"

    def test_nan_bid_reported_as_error(self, session):
        execute(session, "next")
        assert execute(session, "bid nan").startswith("Error: Bid must be a number")
        assert execute(session, "sell") == "Error: No bids placed yet"
        assert session.participants[0].budget == 100

    def test_sell_without_bids(self, session):
        execute(session, "next")
        assert execute(session, "sell") == "Error: No bids placed yet"

    def test_pause_toggles(self, session):
        execute(session, "next")
        assert execute(session, "pause") == "Paused"
        assert execute(session, "pause") == "Resumed"

    def test_cancel(self, session):
        execute(session, "next")
        assert execute(session, "cancel") == "Round cancelled"
        assert session.current_round is None

    def test_quicksell_unknown_item(self, session):
        assert execute(session, "quicksell 0 3").startswith("Error:")

    def test_drop(self, session):
        assert execute(session, "drop 1") == "Removed Bob"
        assert len(session.participants) == 1

    def test_reset(self, session):
        assert execute(session, "reset") == "Session reset"
        assert session.participants == []


class TestFormatStatus:
    def test_empty(self, engine):
        assert format_status(engine) == "No participants yet"

    def test_lists_participants_and_round(self, session):
        execute(session, "next GK")
        status = format_status(session)
        assert "[0] Alice: 100.0M, 0 players" in status
        assert "[1] Bob: 50.0M, 0 players" in status
        assert "Up for auction: Alisson Becker (GK, tier S)" in status
        assert "by Market Value" in status
        assert "On the clock: Alice (20s)" in status

    def test_bench_and_slot_labels(self, session):
        execute(session, "next GK")
        execute(session, f"bid {session.current_round.ledger.minimum_bid()}")
        execute(session, "sell")
        assert "[bench]" in format_status(session)
        execute(session, "auto 0 0")
        assert "[GK]" in format_status(session)


class TestBuildEngine:
    def test_wires_catalog_and_state_dir(self, tmp_path, sample_players):
        players_file = tmp_path / "players.json"
        players_file.write_text(json.dumps(sample_players))

        engine = build_engine(players_file, tmp_path / "state", clock=ManualClock())
        engine.register_participant("Alice")

        assert (tmp_path / "state" / "auction_state.json").exists()
        assert engine.offer_next_item().name


class TestStartReader:
    def test_delivers_lines_then_eof_marker(self, monkeypatch):
        feed = iter(["status", "quit"])

        def fake_input():
            try:
                return next(feed)
            except StopIteration:
                raise EOFError from None

        monkeypatch.setattr("builtins.input", fake_input)

        async def collect():
            lines = asyncio.Queue()
            start_reader(asyncio.get_running_loop(), lines)
            received = []
            while True:
                line = await asyncio.wait_for(lines.get(), timeout=5)
                received.append(line)
                if line is None:
                    return received

        assert asyncio.run(collect()) == ["status", "quit", None]
