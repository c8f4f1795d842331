"""Dynamic pricing for items coming up for auction."""

import math
import random
from typing import Optional, Tuple

from src.item_supply.config import (
    FORM_DOWN_THRESHOLD,
    FORM_UP_THRESHOLD,
    VOLATILITY_MIN,
    VOLATILITY_SPAN,
)


def draw_volatility(rng: Optional[random.Random] = None) -> float:
    """Random market swing factor in [0.8, 1.2)."""
    rng = rng or random
    return VOLATILITY_MIN + rng.random() * VOLATILITY_SPAN


def form_for(volatility: float) -> str:
    """Classify a swing factor as "up", "down" or "stable"."""
    if volatility > FORM_UP_THRESHOLD:
        return "up"
    if volatility < FORM_DOWN_THRESHOLD:
        return "down"
    return "stable"


def dynamic_value(
    market_value: float, rng: Optional[random.Random] = None
) -> Tuple[int, str]:
    """Opening price for an item: market value scaled by today's swing.

    Returns:
        (rounded dynamic value, form label)
    """
    volatility = draw_volatility(rng)
    return math.floor(market_value * volatility + 0.5), form_for(volatility)
