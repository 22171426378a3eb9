"""
Hook slots exposed by the settlement engine.

Each order carries exactly four extension points. At build time a slot may be
populated by at most one extension wrapper.
"""

from enum import Enum


class HookSlot(str, Enum):
    MAKER_AMOUNT = "makerAmount"
    TAKER_AMOUNT = "takerAmount"
    PRE_INTERACTION = "preInteraction"
    POST_INTERACTION = "postInteraction"

    def __str__(self) -> str:
        return self.value

