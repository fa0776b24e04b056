"""In-memory curve store and trade ledger.

``get`` hands out a deep copy, so a service mutates a private snapshot and
nothing is visible until ``save`` swaps it in.
"""

import copy

from src.pm_curve.domain.models import CreatorShareCurve, CurveTrade


class InMemoryCurveRepository:
    def __init__(self) -> None:
        self._curves: dict[str, CreatorShareCurve] = {}

    async def get(self, creator_id: str) -> CreatorShareCurve | None:
        curve = self._curves.get(creator_id)
        return copy.deepcopy(curve) if curve is not None else None

    async def save(self, curve: CreatorShareCurve) -> None:
        self._curves[curve.creator_id] = copy.deepcopy(curve)


class InMemoryCurveTradeLedger:
    def __init__(self) -> None:
        self.trades: list[CurveTrade] = []

    async def append(self, trade: CurveTrade) -> None:
        self.trades.append(trade)

    async def remove(self, trade_id: str) -> None:
        self.trades = [t for t in self.trades if t.id != trade_id]

    def for_creator(self, creator_id: str) -> list[CurveTrade]:
        return [t for t in self.trades if t.creator_id == creator_id]
