"""
筹码分配引擎

把买入/重买/加买的金额换算成每种面值的实体筹码数量。
先执行启发式流程（多样性+比例+贪心），金额不守恒时丢弃结果改用纯贪心兜底；
兜底仍不守恒则返回失败，绝不返回近似的分配。
"""

import logging
from typing import Any, Iterable, Optional, Union

from ..money import quantize_money, to_decimal
from .allocation_strategies import (
    FALLBACK_PIPELINE,
    HEURISTIC_PIPELINE,
    AllocationContext,
    AllocationState,
    DistributionPolicy,
    run_pipeline,
)
from .denomination import ChipSet, Denomination
from .distribution import Distribution, DistributionFailureReason, DistributionResult

__all__ = ['ChipDistributor', 'distribute']

logger = logging.getLogger(__name__)


class ChipDistributor:
    """
    筹码分配引擎

    无状态，可在多个牌桌之间共享；同一实例的并发调用互不影响。
    """

    def __init__(self, policy: Optional[DistributionPolicy] = None):
        """
        初始化筹码分配引擎

        Args:
            policy: 分配策略参数，None时使用默认参数
        """
        self.policy = policy or DistributionPolicy()

    def distribute(self, amount: Any,
                   chip_set: Union[ChipSet, Iterable[Denomination]]) -> DistributionResult:
        """
        计算金额对应的筹码分配

        Args:
            amount: 目标金额（正数）
            chip_set: 面值集合

        Returns:
            分配结果；失败原因为INVALID_AMOUNT、EMPTY_DENOMINATION_SET或
            DISTRIBUTION_UNREACHABLE之一
        """
        digits = self.policy.minor_unit_digits
        try:
            target = quantize_money(to_decimal(amount), digits)
        except ValueError as e:
            logger.warning(f"[筹码分配] 无效金额: {amount!r}")
            return DistributionResult.failure_result(
                DistributionFailureReason.INVALID_AMOUNT, f"无效的金额: {e}"
            )
        if target <= 0:
            logger.warning(f"[筹码分配] 金额必须为正数: {target}")
            return DistributionResult.failure_result(
                DistributionFailureReason.INVALID_AMOUNT,
                f"金额必须为正数，当前为: {target}",
                amount=target
            )

        if not isinstance(chip_set, ChipSet):
            chip_set = ChipSet(tuple(chip_set or ()))
        if not chip_set.usable():
            logger.warning("[筹码分配] 没有可用的筹码面值")
            return DistributionResult.failure_result(
                DistributionFailureReason.EMPTY_DENOMINATION_SET,
                "没有配置面值大于0的筹码",
                amount=target
            )

        ctx = AllocationContext(amount=target, chip_set=chip_set, policy=self.policy)
        try:
            return self._allocate(ctx)
        except (ArithmeticError, ValueError):
            # 筹码数量的位数超出Decimal上下文精度
            logger.warning(f"[筹码分配] 金额 {target} 超出可计算的范围")
            return DistributionResult.failure_result(
                DistributionFailureReason.INVALID_AMOUNT,
                f"金额超出可计算的范围: {target}",
                amount=target
            )

    def _allocate(self, ctx: AllocationContext) -> DistributionResult:
        target, chip_set = ctx.amount, ctx.chip_set
        state = run_pipeline(HEURISTIC_PIPELINE, ctx, on_step=self._log_step)
        if self._is_conserved(state, ctx):
            return DistributionResult.success_result(target, self._normalize(state, chip_set))

        logger.warning(
            f"[筹码分配] 启发式分配未能凑出 {target}（残留 {state.remaining}），改用纯贪心"
        )
        state = run_pipeline(FALLBACK_PIPELINE, ctx, on_step=self._log_step)
        if self._is_conserved(state, ctx):
            return DistributionResult.success_result(
                target, self._normalize(state, chip_set), used_fallback=True
            )

        logger.warning(f"[筹码分配] 现有面值无法凑出 {target}，残留 {state.remaining}")
        return DistributionResult.failure_result(
            DistributionFailureReason.DISTRIBUTION_UNREACHABLE,
            f"无法用现有筹码分配 {target}，残留 {state.remaining}",
            amount=target,
            residual=state.remaining
        )

    def distribute_or_raise(self, amount: Any,
                            chip_set: Union[ChipSet, Iterable[Denomination]]) -> Distribution:
        """同distribute，失败时抛出DistributionError"""
        return self.distribute(amount, chip_set).unwrap()

    def _is_conserved(self, state: AllocationState, ctx: AllocationContext) -> bool:
        total = ctx.chip_set.total_value(state.counts)
        return abs(total - ctx.amount) <= self.policy.tolerance

    @staticmethod
    def _normalize(state: AllocationState, chip_set: ChipSet) -> Distribution:
        # 每种面值都给出数量（未分配的为0），按ID排序
        counts = {d.denomination_id: state.counts.get(d.denomination_id, 0) for d in chip_set.by_id()}
        return Distribution(counts=counts, total_value=chip_set.total_value(counts))

    @staticmethod
    def _log_step(strategy_name: str, state: AllocationState) -> None:
        logger.debug(f"[筹码分配] {strategy_name} 完成，剩余 {state.remaining}，数量 {state.counts}")


def distribute(amount: Any, chip_set: Union[ChipSet, Iterable[Denomination]],
               policy: Optional[DistributionPolicy] = None) -> DistributionResult:
    """
    计算金额对应的筹码分配

    Args:
        amount: 目标金额
        chip_set: 面值集合
        policy: 分配策略参数

    Returns:
        DistributionResult
    """
    return ChipDistributor(policy).distribute(amount, chip_set)
