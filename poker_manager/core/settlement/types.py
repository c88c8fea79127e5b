"""
结算类型定义

Transfer只用于输出，不会作为交易写回玩家账本。
"""

from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, Mapping, Sequence, Tuple

from ..ledger.player import Player
from ..money import MONEY_TOLERANCE, ZERO, is_negligible, money_add, money_sub, to_decimal

__all__ = ['Transfer', 'SettlementResult', 'apply_transfers']


@dataclass(frozen=True)
class Transfer:
    """一笔点对点转账: 债务人付给债权人"""
    from_player: Player
    to_player: Player
    amount: Decimal

    def __post_init__(self):
        """验证转账的有效性"""
        amount = to_decimal(self.amount)
        object.__setattr__(self, 'amount', amount)
        if amount <= 0:
            raise ValueError(f"转账金额必须为正数: {amount}")
        if self.from_player.player_id == self.to_player.player_id:
            raise ValueError("不能向自己转账")

    def __str__(self) -> str:
        return f"{self.from_player.name} -> {self.to_player.name}: {self.amount}"


@dataclass(frozen=True)
class SettlementResult:
    """
    结算结果

    Attributes:
        transfers: 按生成顺序排列的转账
        discrepancy: 对账差额 = 债权总额 - 债务总额，正常应为0
        total_credits: 债权总额
        total_debits: 债务总额（正数）
        unsettled: 转账后仍未结清的玩家余额 {player_id: 带符号余额}
    """
    transfers: Tuple[Transfer, ...] = field(default_factory=tuple)
    discrepancy: Decimal = ZERO
    total_credits: Decimal = ZERO
    total_debits: Decimal = ZERO
    unsettled: Mapping[str, Decimal] = field(default_factory=dict, hash=False)
    tolerance: Decimal = MONEY_TOLERANCE

    def __post_init__(self):
        object.__setattr__(self, "transfers", tuple(self.transfers))
        object.__setattr__(self, "unsettled", MappingProxyType(dict(self.unsettled)))

    @property
    def transfer_count(self) -> int:
        return len(self.transfers)

    @property
    def has_discrepancy(self) -> bool:
        """余额之和不为0，说明上游记账有遗漏"""
        return not is_negligible(self.discrepancy, self.tolerance)

    @property
    def is_balanced(self) -> bool:
        return not self.has_discrepancy

    def to_rows(self) -> Sequence[Dict[str, str]]:
        return [
            {'from': t.from_player.name, 'to': t.to_player.name, 'amount': f"{t.amount:.2f}"}
            for t in self.transfers
        ]


def apply_transfers(balances: Mapping[str, Decimal],
                    transfers: Sequence[Transfer]) -> Dict[str, Decimal]:
    """
    把转账应用到余额上: 付款方余额上升、收款方余额下降（都趋向0）

    Args:
        balances: {player_id: 带符号余额}
        transfers: 转账列表

    Returns:
        新的余额字典
    """
    result = {player_id: to_decimal(balance) for player_id, balance in balances.items()}
    for transfer in transfers:
        payer = transfer.from_player.player_id
        payee = transfer.to_player.player_id
        result[payer] = money_add(result.get(payer, ZERO), transfer.amount)
        result[payee] = money_sub(result.get(payee, ZERO), transfer.amount)
    return result
