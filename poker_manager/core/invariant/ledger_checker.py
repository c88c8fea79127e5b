"""
账本检查器

检查玩家交易记录的一致性。
"""

from collections import Counter

from ..chips.denomination import ChipSet
from ..ledger.player import Player
from ..money import MONEY_TOLERANCE
from .base_checker import BaseInvariantChecker
from .types import InvariantType

__all__ = ['LedgerInvariantChecker']


class LedgerInvariantChecker(BaseInvariantChecker):
    """账本检查器

    验证以下规则：
    1. 交易ID唯一
    2. 每笔入账交易携带的筹码分配能还原出交易金额
    """

    def __init__(self, chip_set: ChipSet, tolerance=MONEY_TOLERANCE):
        super().__init__(InvariantType.LEDGER_BALANCE)
        self.chip_set = chip_set
        self.tolerance = tolerance

    def _perform_check(self, player: Player) -> None:
        occurrences = Counter(t.transaction_id for t in player.transactions)
        duplicated = [t_id for t_id, n in occurrences.items() if n > 1]
        if duplicated:
            self._create_violation(
                f"玩家 {player.player_id} 存在重复的交易ID: {duplicated}",
                player_ids=(player.player_id,),
                transaction_id=duplicated[0]
            )
            return

        for transaction in player.transactions:
            if transaction.distribution is None:
                continue
            total = self.chip_set.total_value(transaction.distribution.counts)
            if abs(total - transaction.magnitude) > self.tolerance:
                self._create_violation(
                    f"交易 {transaction.transaction_id} 的筹码分配 {total} 与金额 {transaction.magnitude} 不符",
                    expected=transaction.magnitude,
                    actual=total,
                    player_ids=(player.player_id,),
                    transaction_id=transaction.transaction_id
                )
