"""
玩家账本

Player是不可变的: 每次记账都返回新的Player。余额严格等于所有带符号
交易金额之和，从不根据筹码数量反推。
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Optional, Tuple
import logging

from ..chips.distribution import Distribution
from ..money import MINOR_UNIT_DIGITS, money_sum, quantize_money, to_decimal
from .transaction import LedgerTransaction, TransactionKind

__all__ = ['Player', 'apply_transaction', 'close_round', 'reset_player']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Player:
    """
    玩家

    Attributes:
        player_id: 玩家ID
        name: 玩家名称
        transactions: 按时间顺序的交易记录
        round_number: 当前轮次（锦标赛）
        round_start_index: 当前轮次第一笔交易在transactions中的位置
    """
    player_id: str
    name: str
    transactions: Tuple[LedgerTransaction, ...] = field(default_factory=tuple)
    round_number: int = 1
    round_start_index: int = 0

    def __post_init__(self):
        """验证玩家数据的有效性"""
        if not self.player_id:
            raise ValueError("player_id不能为空")
        if not self.name or not self.name.strip():
            raise ValueError("玩家名称不能为空")
        object.__setattr__(self, 'transactions', tuple(self.transactions))
        if not 0 <= self.round_start_index <= len(self.transactions):
            raise ValueError(f"round_start_index越界: {self.round_start_index}")

    @property
    def balance(self) -> Decimal:
        """带符号的累计余额: 收入减付出"""
        return money_sum(t.amount for t in self.transactions)

    @property
    def total_paid_in(self) -> Decimal:
        return money_sum(t.magnitude for t in self.transactions if t.kind.is_inbound)

    @property
    def total_paid_out(self) -> Decimal:
        return money_sum(t.amount for t in self.transactions if not t.kind.is_inbound)

    @property
    def has_transactions(self) -> bool:
        return bool(self.transactions)

    @property
    def round_transactions(self) -> Tuple[LedgerTransaction, ...]:
        return self.transactions[self.round_start_index:]

    def _count_in_round(self, kind: TransactionKind) -> int:
        return sum(1 for t in self.round_transactions if t.kind == kind)

    @property
    def rebuys_this_round(self) -> int:
        return self._count_in_round(TransactionKind.REBUY)

    @property
    def add_ons_this_round(self) -> int:
        return self._count_in_round(TransactionKind.ADD_ON)

    def transactions_of(self, kind: TransactionKind) -> Tuple[LedgerTransaction, ...]:
        return tuple(t for t in self.transactions if t.kind == kind)

    def to_dict(self) -> dict:
        return {
            'player_id': self.player_id,
            'name': self.name,
            'balance': self.balance,
            'total_paid_in': self.total_paid_in,
            'total_paid_out': self.total_paid_out,
            'round_number': self.round_number,
            'rebuys': self.rebuys_this_round,
            'add_ons': self.add_ons_this_round,
        }


def apply_transaction(player: Player, kind: TransactionKind, amount: Any,
                      distribution: Optional[Distribution] = None,
                      description: str = "",
                      digits: int = MINOR_UNIT_DIGITS) -> Player:
    """
    记录一笔交易

    Args:
        player: 玩家
        kind: 交易类型
        amount: 金额（正数，符号由交易类型决定）
        distribution: 入账交易对应的筹码分配
        description: 交易描述
        digits: 最小货币单位位数

    Returns:
        记账后的新Player

    Raises:
        ValueError: 金额非正数或非数值
    """
    magnitude = quantize_money(to_decimal(amount), digits)
    if magnitude <= 0:
        raise ValueError(f"交易金额必须为正数，当前为: {magnitude}")

    transaction = LedgerTransaction(
        transaction_id=f"{kind.value}_{player.player_id}_{len(player.transactions)}",
        kind=kind,
        player_id=player.player_id,
        amount=magnitude * kind.sign,
        round_number=player.round_number,
        distribution=distribution,
        description=description
    )
    updated = replace(player, transactions=player.transactions + (transaction,))
    logger.debug(f"[账本] 玩家 {player.name} 记录 {kind.value} {transaction.amount}，余额 {updated.balance}")
    return updated


def close_round(player: Player) -> Player:
    """
    结束当前轮次: 清空本轮计数，余额保持不变

    Returns:
        进入下一轮的新Player
    """
    return replace(
        player,
        round_number=player.round_number + 1,
        round_start_index=len(player.transactions)
    )


def reset_player(player: Player) -> Player:
    """清空全部交易（仅用于整场重置）"""
    return Player(player_id=player.player_id, name=player.name)
