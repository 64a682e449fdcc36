"""Values threaded through the three-phase wager protocol."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from betbridge.errors import ErrorKind
from betbridge.odds.types import WagerType


@dataclass(frozen=True)
class WagerRequest:
    selection_token: str
    amount: int
    credential: str = field(repr=False)
    wager_type: WagerType = WagerType.STRAIGHT


@dataclass(frozen=True)
class CompiledWager:
    """Upstream identifiers returned by compile and needed by confirm and post."""

    selection: str
    wager_type: WagerType
    wager_type_id: str
    game_id: Any
    play: Any
    pitcher: Any = 0
    teaser_points_purchased: Any = 0
    description: str = "Unknown bet"

    def detail_data(self, amount: int) -> list[dict[str, Any]]:
        return [
            {
                "IdGame": self.game_id,
                "Play": self.play,
                "Amount": amount,
                "RiskWin": 0,
                "Pitcher": self.pitcher or 0,
                "TeaserPointsPurchased": self.teaser_points_purchased or 0,
                "Points": {"BuyPoints": 0, "BuyPointsDesc": "", "LineDesc": "", "selected": True},
            }
        ]


@dataclass(frozen=True)
class ConfirmedWager:
    compiled: CompiledWager
    amount: int
    risk: float
    win: float


@dataclass(frozen=True)
class Placed:
    ticket_number: str
    risk_amount: float
    win_amount: float
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticketNumber": self.ticket_number,
            "risking": self.risk_amount,
            "toWin": self.win_amount,
            "description": self.description,
        }


@dataclass(frozen=True)
class Rejected:
    reason: ErrorKind
    detail: str

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.detail, "errorKind": self.reason.value}


WagerOutcome = Union[Placed, Rejected]
