# src/pm_curve/domain/repository.py
"""Repository Protocols for creator share curves.

Unit tests inject the in-memory implementation; a durable store implements
the same Protocol outside this package.
"""

from typing import Protocol

from src.pm_curve.domain.models import CreatorShareCurve, CurveTrade


class CurveRepositoryProtocol(Protocol):
    async def get(self, creator_id: str) -> CreatorShareCurve | None: ...

    async def save(self, curve: CreatorShareCurve) -> None: ...


class CurveTradeLedgerProtocol(Protocol):
    async def append(self, trade: CurveTrade) -> None: ...

    async def remove(self, trade_id: str) -> None: ...
