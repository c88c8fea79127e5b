"""
不变量检查器基础类

子类实现 _perform_check，通过 _create_violation 登记违反记录；
check() 负责计时并把登记的记录打包成检查结果。
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Iterable, List, Optional
import time

from .types import InvariantCheckResult, InvariantType, InvariantViolation, Severity

__all__ = ['BaseInvariantChecker']


class BaseInvariantChecker(ABC):
    """不变量检查器基础抽象类"""

    def __init__(self, invariant_type: InvariantType):
        self.invariant_type = invariant_type
        self._violations: List[InvariantViolation] = []

    @abstractmethod
    def _perform_check(self, subject: Any) -> None:
        """执行具体的检查，发现问题时调用 _create_violation"""

    def check(self, subject: Any) -> InvariantCheckResult:
        """
        执行不变量检查

        Args:
            subject: 被检查的对象（分配、结算或玩家）

        Returns:
            InvariantCheckResult: 检查结果
        """
        start_time = time.perf_counter()
        self._violations = []
        try:
            self._perform_check(subject)
        except (ArithmeticError, ValueError, TypeError, KeyError) as e:
            # 数据坏到无法计算时也记为严重违反
            self._create_violation(f"检查过程中发生异常 {type(e).__name__}: {e}")
        return InvariantCheckResult(
            invariant_type=self.invariant_type,
            violations=tuple(self._violations),
            check_duration=time.perf_counter() - start_time
        )

    def _create_violation(self, description: str,
                          severity: Severity = Severity.CRITICAL,
                          invariant_type: Optional[InvariantType] = None,
                          expected: Optional[Decimal] = None,
                          actual: Optional[Decimal] = None,
                          player_ids: Iterable[str] = (),
                          denomination_ids: Iterable[int] = (),
                          transaction_id: Optional[str] = None) -> InvariantViolation:
        """
        登记一条违反记录

        Args:
            description: 违反描述
            severity: 严重程度
            invariant_type: 具体违反的不变量，默认为检查器自身的类型
            expected: 期望值
            actual: 实际值
            player_ids: 涉及的玩家
            denomination_ids: 涉及的筹码面值
            transaction_id: 涉及的交易
        """
        violation = InvariantViolation(
            invariant_type=invariant_type or self.invariant_type,
            description=description,
            severity=severity,
            expected=expected,
            actual=actual,
            player_ids=tuple(player_ids),
            denomination_ids=tuple(denomination_ids),
            transaction_id=transaction_id
        )
        self._violations.append(violation)
        return violation
