"""
结算引擎

把所有玩家的净余额压缩为最少的点对点转账:
债务人按余额从负到正、债权人按余额从正到负排序，双指针逐一撮合。
任何债务人都可以付给任何债权人，因此这种贪心撮合的转账数
不超过 债务人数 + 债权人数 - 1。
"""

import logging
from decimal import Decimal
from typing import List, Sequence, Tuple

from ..ledger.player import Player
from ..money import MINOR_UNIT_DIGITS, MONEY_TOLERANCE, is_negligible, money_sub, money_sum, quantize_money
from .types import SettlementResult, Transfer

__all__ = ['SettlementEngine', 'settle']

logger = logging.getLogger(__name__)


class SettlementEngine:
    """
    结算引擎

    只读取玩家余额，在工作副本上撮合，从不修改调用方的Player。
    """

    def __init__(self, tolerance: Decimal = MONEY_TOLERANCE,
                 minor_unit_digits: int = MINOR_UNIT_DIGITS):
        """
        初始化结算引擎

        Args:
            tolerance: 余额视为0的容差
            minor_unit_digits: 转账金额取整的小数位数
        """
        self.tolerance = tolerance
        self.digits = minor_unit_digits

    def settle(self, players: Sequence[Player]) -> SettlementResult:
        """
        计算结算转账

        Args:
            players: 余额已确定的玩家列表

        Returns:
            结算结果（转账列表 + 对账差额）
        """
        entries = [(index, player, quantize_money(player.balance, self.digits))
                   for index, player in enumerate(players)]

        # 余额相同时按原始顺序，保证结果可复现
        debtors = sorted(
            (e for e in entries if e[2] < 0 and not is_negligible(e[2], self.tolerance)),
            key=lambda e: (e[2], e[0])
        )
        creditors = sorted(
            (e for e in entries if e[2] > 0 and not is_negligible(e[2], self.tolerance)),
            key=lambda e: (-e[2], e[0])
        )

        total_debits = money_sum((-e[2] for e in debtors), self.digits)
        total_credits = money_sum((e[2] for e in creditors), self.digits)
        discrepancy = money_sub(total_credits, total_debits, self.digits)

        debts: List[Tuple[Player, Decimal]] = [(e[1], -e[2]) for e in debtors]
        credits: List[Tuple[Player, Decimal]] = [(e[1], e[2]) for e in creditors]
        transfers: List[Transfer] = []

        i = j = 0
        while i < len(debts) and j < len(credits):
            debtor, owed = debts[i]
            creditor, due = credits[j]
            amount = quantize_money(min(owed, due), self.digits)
            if amount > 0:
                transfers.append(Transfer(from_player=debtor, to_player=creditor, amount=amount))
            owed = money_sub(owed, amount, self.digits)
            due = money_sub(due, amount, self.digits)
            debts[i] = (debtor, owed)
            credits[j] = (creditor, due)
            if is_negligible(owed, self.tolerance):
                i += 1
            if is_negligible(due, self.tolerance):
                j += 1

        unsettled = {p.player_id: -owed for p, owed in debts[i:] if not is_negligible(owed, self.tolerance)}
        unsettled.update({p.player_id: due for p, due in credits[j:] if not is_negligible(due, self.tolerance)})

        result = SettlementResult(
            transfers=tuple(transfers),
            discrepancy=discrepancy,
            total_credits=total_credits,
            total_debits=total_debits,
            unsettled=unsettled,
            tolerance=self.tolerance
        )

        logger.info(
            f"[结算] {len(debtors)} 名债务人, {len(creditors)} 名债权人, 生成 {result.transfer_count} 笔转账"
        )
        if result.has_discrepancy:
            logger.warning(
                f"[结算] 余额不平: 债权 {total_credits}, 债务 {total_debits}, 差额 {discrepancy}"
            )
        return result


def settle(players: Sequence[Player]) -> SettlementResult:
    """使用默认参数结算"""
    return SettlementEngine().settle(players)
