"""
不变量检查器类型定义

违反记录直接携带出错的金额、玩家和面值，调用方不需要解析描述文字。
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum, auto
from typing import Optional, Sequence, Tuple

__all__ = [
    'InvariantType',
    'Severity',
    'InvariantViolation',
    'InvariantCheckResult',
    'InvariantError'
]


class InvariantType(Enum):
    """不变量类型枚举"""
    VALUE_CONSERVATION = auto()     # 分配金额守恒
    NON_NEGATIVE_COUNTS = auto()    # 筹码数量非负整数
    SETTLEMENT_ZERO_SUM = auto()    # 结算后余额归零
    TRANSFER_BOUND = auto()         # 转账笔数上限
    LEDGER_BALANCE = auto()         # 账本余额一致性


class Severity(Enum):
    """违反的严重程度"""
    CRITICAL = "CRITICAL"   # 账目已经出错，操作必须中止
    WARNING = "WARNING"     # 如实报告，操作照常完成


@dataclass(frozen=True)
class InvariantViolation:
    """
    不变量违反记录

    expected/actual 是出错的一对数值（目标金额与实际金额、转账上限与实际笔数等），
    player_ids、denomination_ids、transaction_id 指出出错的对象。
    """
    invariant_type: InvariantType
    description: str
    severity: Severity = Severity.CRITICAL
    expected: Optional[Decimal] = None
    actual: Optional[Decimal] = None
    player_ids: Tuple[str, ...] = ()
    denomination_ids: Tuple[int, ...] = ()
    transaction_id: Optional[str] = None

    def __post_init__(self):
        if not self.description:
            raise ValueError("description不能为空")
        object.__setattr__(self, 'player_ids', tuple(self.player_ids))
        object.__setattr__(self, 'denomination_ids', tuple(self.denomination_ids))

    @property
    def is_critical(self) -> bool:
        return self.severity == Severity.CRITICAL

    @property
    def difference(self) -> Optional[Decimal]:
        """actual - expected，任一缺失时为None"""
        if self.expected is None or self.actual is None:
            return None
        return self.actual - self.expected


@dataclass(frozen=True)
class InvariantCheckResult:
    """不变量检查结果，没有任何违反记录即为通过"""
    invariant_type: InvariantType
    violations: Tuple[InvariantViolation, ...] = ()
    check_duration: float = 0.0  # 检查耗时（秒）

    def __post_init__(self):
        object.__setattr__(self, 'violations', tuple(self.violations))
        if self.check_duration < 0:
            raise ValueError("check_duration不能为负数")

    @property
    def is_valid(self) -> bool:
        return not self.violations

    @property
    def critical_violations(self) -> Tuple[InvariantViolation, ...]:
        return tuple(v for v in self.violations if v.is_critical)


class InvariantError(Exception):
    """存在严重违反时抛出"""

    def __init__(self, message: str, violations: Sequence[InvariantViolation]):
        super().__init__(message)
        self.violations = tuple(violations)

    @property
    def critical_violations(self) -> Tuple[InvariantViolation, ...]:
        return tuple(v for v in self.violations if v.is_critical)
