"""Exception taxonomy for the auction core.

Every error is raised at the boundary of the operation that failed, after
which the state is exactly as it was before the call.
"""


class AuctionError(Exception):
    """Base class for all recoverable auction errors."""


class ValidationError(AuctionError):
    """Raised when an action violates auction rules (bad bid, bad name, ...)."""


class NotFoundError(AuctionError):
    """Raised for an unknown participant, inventory index or roster slot."""


class NoBidsError(AuctionError):
    """Raised when a sale is attempted on a round without bids."""


class InsufficientFundsError(AuctionError):
    """Raised when the winning bidder can no longer cover the winning bid."""


class NoEmptySlotError(AuctionError):
    """Raised when autofill finds no open slot the item strictly qualifies for."""


class SupplyExhaustedError(AuctionError):
    """Raised when no catalog item matches the current filter and exclusions."""
