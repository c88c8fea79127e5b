"""
结算检查器

检查结算转账能否把所有余额归零，以及转账笔数是否在上限之内。
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from ..ledger.player import Player
from ..money import ZERO, is_negligible, money_sum
from ..settlement.types import SettlementResult, apply_transfers
from .base_checker import BaseInvariantChecker
from .types import InvariantType, Severity

__all__ = ['SettlementCheckSubject', 'SettlementInvariantChecker']


@dataclass(frozen=True)
class SettlementCheckSubject:
    """待检查的结算"""
    players: Sequence[Player]
    result: SettlementResult


class SettlementInvariantChecker(BaseInvariantChecker):
    """结算检查器

    验证以下规则：
    1. 余额之和为0时，应用全部转账后每位玩家余额归零
    2. 余额之和不为0时，差额如实报告（WARNING，不算错误）
    3. 转账笔数 <= 债务人数 + 债权人数 - 1
    """

    def __init__(self):
        super().__init__(InvariantType.SETTLEMENT_ZERO_SUM)

    def _perform_check(self, subject: SettlementCheckSubject) -> None:
        result = subject.result
        balances = {p.player_id: p.balance for p in subject.players}
        self._check_transfer_bound(balances, result)

        if is_negligible(money_sum(balances.values()), result.tolerance):
            self._check_zero_sum(balances, result)
        else:
            self._create_violation(
                f"结算输入余额不平，差额 {result.discrepancy}",
                Severity.WARNING,
                expected=ZERO,
                actual=result.discrepancy,
                player_ids=result.unsettled
            )

    def _check_zero_sum(self, balances, result: SettlementResult) -> None:
        final = apply_transfers(balances, result.transfers)
        leftover = {p_id: b for p_id, b in final.items() if not is_negligible(b, result.tolerance)}
        if leftover:
            self._create_violation(
                f"结算后仍有玩家余额不为0: {leftover}",
                expected=ZERO,
                actual=money_sum(abs(b) for b in leftover.values()),
                player_ids=leftover
            )

    def _check_transfer_bound(self, balances, result: SettlementResult) -> None:
        debtors = sum(1 for b in balances.values() if b < 0 and not is_negligible(b, result.tolerance))
        creditors = sum(1 for b in balances.values() if b > 0 and not is_negligible(b, result.tolerance))
        bound = max(debtors + creditors - 1, 0)
        if result.transfer_count > bound:
            self._create_violation(
                f"转账笔数超出上限: {result.transfer_count} > {bound}",
                invariant_type=InvariantType.TRANSFER_BOUND,
                expected=Decimal(bound),
                actual=Decimal(result.transfer_count)
            )
