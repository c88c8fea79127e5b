"""
筹码分配检查器

检查分配结果的金额守恒与筹码数量非负。
"""

from dataclasses import dataclass
from decimal import Decimal

from ..chips.denomination import ChipSet
from ..chips.distribution import Distribution
from ..money import MONEY_TOLERANCE
from .base_checker import BaseInvariantChecker
from .types import InvariantType

__all__ = ['DistributionCheckSubject', 'DistributionInvariantChecker']


@dataclass(frozen=True)
class DistributionCheckSubject:
    """待检查的分配"""
    amount: Decimal
    distribution: Distribution
    chip_set: ChipSet


class DistributionInvariantChecker(BaseInvariantChecker):
    """筹码分配检查器

    验证以下规则：
    1. 金额守恒：Σ 数量 × 面值 与目标金额相差不超过容差
    2. 每种面值的数量都是非负整数
    3. 分配中的面值都属于面值集合
    """

    def __init__(self, tolerance: Decimal = MONEY_TOLERANCE):
        super().__init__(InvariantType.VALUE_CONSERVATION)
        self.tolerance = tolerance

    def _perform_check(self, subject: DistributionCheckSubject) -> None:
        known = self._check_known_denominations(subject)
        counts_ok = self._check_non_negative_counts(subject.distribution.counts)
        if known and counts_ok:
            self._check_value_conservation(subject)

    def _check_known_denominations(self, subject: DistributionCheckSubject) -> bool:
        unknown = [d_id for d_id in subject.distribution.counts if d_id not in subject.chip_set]
        if unknown:
            self._create_violation(
                f"分配中包含未知的筹码ID: {unknown}",
                denomination_ids=unknown
            )
        return not unknown

    def _check_non_negative_counts(self, counts) -> bool:
        invalid = {d_id: c for d_id, c in counts.items()
                   if isinstance(c, bool) or not isinstance(c, int) or c < 0}
        if invalid:
            self._create_violation(
                f"筹码数量必须是非负整数: {invalid}",
                invariant_type=InvariantType.NON_NEGATIVE_COUNTS,
                denomination_ids=list(invalid)
            )
        return not invalid

    def _check_value_conservation(self, subject: DistributionCheckSubject) -> None:
        total = subject.chip_set.total_value(subject.distribution.counts)
        difference = total - subject.amount
        if abs(difference) > self.tolerance:
            self._create_violation(
                f"分配金额不守恒: 目标{subject.amount}, 实际{total}, 差异{difference}",
                expected=subject.amount,
                actual=total
            )
