"""
账本交易记录

定义交易类型与交易记录结构。交易只追加，不修改、不删除。
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional
import time

from ..chips.distribution import Distribution
from ..money import to_decimal

__all__ = ['TransactionKind', 'LedgerTransaction']


class TransactionKind(Enum):
    """交易类型"""
    BUY_IN = "buy_in"        # 买入
    REBUY = "rebuy"          # 重买
    ADD_ON = "add_on"        # 加买
    PRIZE = "prize"          # 奖金
    CASH_OUT = "cash_out"    # 现金局离桌兑现

    @property
    def is_inbound(self) -> bool:
        """资金进入牌桌（玩家付出）"""
        return self in (TransactionKind.BUY_IN, TransactionKind.REBUY, TransactionKind.ADD_ON)

    @property
    def sign(self) -> int:
        return -1 if self.is_inbound else 1


@dataclass(frozen=True)
class LedgerTransaction:
    """账本交易记录"""
    transaction_id: str
    kind: TransactionKind
    player_id: str
    amount: Decimal                      # 带符号: 付出为负，收入为正
    round_number: int = 1
    distribution: Optional[Distribution] = None
    timestamp: float = 0.0
    description: str = ""

    def __post_init__(self):
        """验证交易记录的有效性"""
        if not self.transaction_id:
            raise ValueError("transaction_id不能为空")
        if not self.player_id:
            raise ValueError("player_id不能为空")
        amount = to_decimal(self.amount)
        object.__setattr__(self, 'amount', amount)
        if amount == 0:
            raise ValueError("交易金额不能为0")
        if (amount < 0) != self.kind.is_inbound:
            raise ValueError(f"{self.kind.value}交易的金额符号错误: {amount}")
        if self.distribution is not None and not self.kind.is_inbound:
            raise ValueError(f"{self.kind.value}交易不能携带筹码分配")
        if self.round_number < 1:
            raise ValueError(f"round_number必须为正数: {self.round_number}")
        if self.timestamp <= 0:
            object.__setattr__(self, 'timestamp', time.time())

    @property
    def magnitude(self) -> Decimal:
        return abs(self.amount)
