"""
GridBazaar - Realtime Channel

In-process publish/subscribe of row change events.
"""
from gridbazaar.realtime.broker import (
    ChangeEvent,
    Subscription,
    RealtimeBroker,
    RealtimeFeed,
    parse_filter,
)

__all__ = [
    "ChangeEvent",
    "Subscription",
    "RealtimeBroker",
    "RealtimeFeed",
    "parse_filter",
]
