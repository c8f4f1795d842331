from pathlib import Path

# Base project directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Persisted game state
STATE_DIR = PROJECT_ROOT / "data" / "state"
STATE_FILENAME = "auction_state.json"

# Turn timing
TURN_SECONDS = 20
TICK_INTERVAL_SECONDS = 1.0

# Budgets and bidding
DEFAULT_BUDGET = 100.0
MIN_BID_INCREMENT = 1

# Quick-sell returns this share of the price paid
RESALE_RATE = 0.8
