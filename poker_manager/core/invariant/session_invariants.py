"""
会话不变量检查器

整合所有不变量检查器，提供统一的检查接口。
"""

from decimal import Decimal
from typing import Dict, List, Sequence

from ..chips.denomination import ChipSet
from ..chips.distribution import Distribution
from ..ledger.player import Player
from ..money import MONEY_TOLERANCE
from ..settlement.types import SettlementResult
from .distribution_checker import DistributionCheckSubject, DistributionInvariantChecker
from .ledger_checker import LedgerInvariantChecker
from .settlement_checker import SettlementCheckSubject, SettlementInvariantChecker
from .types import InvariantCheckResult, InvariantError, InvariantViolation

__all__ = ['SessionInvariants']


class SessionInvariants:
    """会话不变量检查器

    只有CRITICAL级别的违反才会抛出InvariantError；
    WARNING（例如结算输入余额不平）只记录在检查结果中。
    """

    def __init__(self, tolerance: Decimal = MONEY_TOLERANCE):
        self.distribution_checker = DistributionInvariantChecker(tolerance)
        self.settlement_checker = SettlementInvariantChecker()
        self.tolerance = tolerance

    def check_distribution(self, amount: Decimal, distribution: Distribution,
                           chip_set: ChipSet) -> InvariantCheckResult:
        return self.distribution_checker.check(
            DistributionCheckSubject(amount=amount, distribution=distribution, chip_set=chip_set)
        )

    def check_settlement(self, players: Sequence[Player],
                         result: SettlementResult) -> InvariantCheckResult:
        return self.settlement_checker.check(SettlementCheckSubject(players=players, result=result))

    def check_ledgers(self, players: Sequence[Player],
                      chip_set: ChipSet) -> Dict[str, InvariantCheckResult]:
        checker = LedgerInvariantChecker(chip_set, self.tolerance)
        return {player.player_id: checker.check(player) for player in players}

    def verify_distribution(self, amount: Decimal, distribution: Distribution, chip_set: ChipSet) -> None:
        """检查分配，发现严重违反时抛出InvariantError"""
        self._raise_on_critical(self.check_distribution(amount, distribution, chip_set).violations)

    def verify_settlement(self, players: Sequence[Player], result: SettlementResult) -> None:
        """检查结算，发现严重违反时抛出InvariantError"""
        self._raise_on_critical(self.check_settlement(players, result).violations)

    def verify_ledgers(self, players: Sequence[Player], chip_set: ChipSet) -> None:
        """检查所有玩家账本，发现严重违反时抛出InvariantError"""
        violations: List[InvariantViolation] = []
        for result in self.check_ledgers(players, chip_set).values():
            violations.extend(result.violations)
        self._raise_on_critical(violations)

    @staticmethod
    def _raise_on_critical(violations: List[InvariantViolation]) -> None:
        critical = [v for v in violations if v.is_critical]
        if critical:
            raise InvariantError(f"发现{len(critical)}个严重不变量违反", violations)
