"""
奖池与轮次冠军

赢家通吃的奖池计算，以及锦标赛每轮的冠军记录。
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from ..money import quantize_money, to_decimal

__all__ = ['PrizePool', 'RoundWinner']

MIN_PLAYERS = 2
MIN_BUY_IN = Decimal("1")


@dataclass(frozen=True)
class PrizePool:
    """赢家通吃的奖池"""
    players: int
    buy_in: Decimal
    total: Decimal

    @classmethod
    def calculate(cls, players: int, buy_in: Any) -> 'PrizePool':
        """
        计算奖池

        Args:
            players: 参赛人数（至少2人）
            buy_in: 每人买入金额（至少1）

        Raises:
            ValueError: 人数或买入金额不足
        """
        if isinstance(players, bool) or not isinstance(players, int) or players < MIN_PLAYERS:
            raise ValueError(f"参赛人数至少为{MIN_PLAYERS}人: {players}")
        buy_in = quantize_money(to_decimal(buy_in))
        if buy_in < MIN_BUY_IN:
            raise ValueError(f"买入金额至少为{MIN_BUY_IN}: {buy_in}")
        return cls(players=players, buy_in=buy_in, total=quantize_money(buy_in * players))


@dataclass(frozen=True)
class RoundWinner:
    """轮次冠军"""
    round_number: int
    player_id: str
    winner_name: str
