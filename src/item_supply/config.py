from pathlib import Path

# Base project directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Player database
DATA_DIR = PROJECT_ROOT / "data"
PLAYERS_FILE = DATA_DIR / "players.json"

REQUIRED_COLUMNS = ["name", "position", "tier", "market_value"]
OPTIONAL_COLUMNS = ["league", "era", "club", "age", "nationality"]

# Filter value meaning "no restriction"
ANY = "all"

# Dynamic value: market value x volatility in [VOLATILITY_MIN, VOLATILITY_MIN + VOLATILITY_SPAN)
VOLATILITY_MIN = 0.8
VOLATILITY_SPAN = 0.4

# Form indicator thresholds on the volatility factor
FORM_UP_THRESHOLD = 1.05
FORM_DOWN_THRESHOLD = 0.95
