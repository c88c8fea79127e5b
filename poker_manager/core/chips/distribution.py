"""
筹码分配结果

Distribution是成功的分配（每种面值的筹码数量），DistributionResult把成功
与失败区分开：失败永远不会以"近似的分配"形式返回给调用方。
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from ..money import ZERO
from .denomination import ChipSet

__all__ = [
    'Distribution',
    'DistributionFailureReason',
    'DistributionResult',
    'DistributionError',
]


class DistributionFailureReason(Enum):
    """分配失败原因"""
    INVALID_AMOUNT = "invalid_amount"                        # 金额非正数或非数值
    EMPTY_DENOMINATION_SET = "empty_denomination_set"        # 没有可用面值
    DISTRIBUTION_UNREACHABLE = "distribution_unreachable"    # 现有面值无法凑出该金额


@dataclass(frozen=True)
class Distribution:
    """
    筹码分配: 每种面值的筹码数量

    counts是只读视图，记入账本后不会再被修改；需要可变副本时用to_dict()。
    """
    counts: Mapping[int, int] = field(hash=False)
    total_value: Decimal

    def __post_init__(self):
        """验证筹码数量并冻结counts"""
        object.__setattr__(self, "counts", MappingProxyType(dict(self.counts)))
        for denomination_id, count in self.counts.items():
            if isinstance(count, bool) or not isinstance(count, int):
                raise ValueError(f"筹码{denomination_id}的数量必须是整数: {count!r}")
            if count < 0:
                raise ValueError(f"筹码{denomination_id}的数量不能为负数: {count}")

    @classmethod
    def empty(cls, chip_set: ChipSet) -> 'Distribution':
        return cls(counts={d.denomination_id: 0 for d in chip_set.by_id()}, total_value=ZERO)

    def count_for(self, denomination_id: int) -> int:
        return self.counts.get(denomination_id, 0)

    def to_dict(self) -> Dict[int, int]:
        """返回counts的可变副本"""
        return dict(self.counts)

    @property
    def chip_count(self) -> int:
        """实体筹码总数"""
        return sum(self.counts.values())

    @property
    def is_empty(self) -> bool:
        return self.chip_count == 0

    def denominations_used(self) -> int:
        """用到的面值种类数"""
        return sum(1 for count in self.counts.values() if count > 0)

    def ordered(self, chip_set: ChipSet, by: str = "id") -> List[Tuple[int, int]]:
        """
        按展示顺序返回(denomination_id, count)列表

        Args:
            chip_set: 面值集合
            by: "id" 按ID排序，"face_value" 按面值从小到大

        Returns:
            有序的(id, count)列表
        """
        if by == "id":
            denominations = chip_set.by_id()
        elif by == "face_value":
            denominations = chip_set.ascending()
        else:
            raise ValueError(f"不支持的排序方式: {by}")
        return [(d.denomination_id, self.count_for(d.denomination_id)) for d in denominations]

    def merged_with(self, other: 'Distribution') -> 'Distribution':
        """逐面值相加，用于统计整桌的筹码总数"""
        merged = dict(self.counts)
        for denomination_id, count in other.counts.items():
            merged[denomination_id] = merged.get(denomination_id, 0) + count
        return Distribution(counts=merged, total_value=self.total_value + other.total_value)


class DistributionError(Exception):
    """分配失败异常（仅在调用方要求抛出时使用）"""

    def __init__(self, message: str, reason: DistributionFailureReason,
                 residual: Optional[Decimal] = None):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.residual = residual


@dataclass(frozen=True)
class DistributionResult:
    """分配结果: 成功时携带Distribution，失败时携带原因"""
    success: bool
    amount: Optional[Decimal] = None
    distribution: Optional[Distribution] = None
    reason: Optional[DistributionFailureReason] = None
    message: str = ""
    residual: Optional[Decimal] = None
    used_fallback: bool = False

    def __post_init__(self):
        if self.success and self.distribution is None:
            raise ValueError("成功的分配结果必须包含distribution")
        if not self.success and self.reason is None:
            raise ValueError("失败的分配结果必须包含失败原因")

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def success_result(cls, amount: Decimal, distribution: Distribution,
                       used_fallback: bool = False) -> 'DistributionResult':
        """创建成功结果"""
        return cls(success=True, amount=amount, distribution=distribution,
                   used_fallback=used_fallback)

    @classmethod
    def failure_result(cls, reason: DistributionFailureReason, message: str,
                       amount: Optional[Decimal] = None,
                       residual: Optional[Decimal] = None) -> 'DistributionResult':
        """创建失败结果"""
        return cls(success=False, amount=amount, reason=reason, message=message, residual=residual)

    def unwrap(self) -> Distribution:
        """返回分配，失败时抛出DistributionError"""
        if not self.success:
            raise DistributionError(self.message, self.reason, self.residual)
        return self.distribution
