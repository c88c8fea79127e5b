"""
筹码分配策略

分配流程由若干个独立的分配策略按顺序组合而成，每个策略都是纯函数
``(state, ctx) -> state``：读入当前剩余金额与筹码数量，返回新的状态。

启发式流程:
    1. seed_variety        每种小面值先发1枚，保证桌面颜色多样
    2. proportional_share  按面值档位分配剩余金额的一定比例
    3. greedy_fill         从大到小贪心填充
    4. residual_mop_up     从小到大再贪心一次，收拾取整残留

兜底流程:
    greedy_fill（从零开始的纯贪心）
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, List, Optional, Tuple

from ..money import MINOR_UNIT_DIGITS, MONEY_TOLERANCE, money_sub, quantize_money, to_decimal
from .denomination import ChipSet, Denomination

__all__ = [
    'DistributionPolicy',
    'AllocationState',
    'AllocationContext',
    'AllocationStrategy',
    'seed_variety',
    'proportional_share',
    'greedy_fill',
    'residual_mop_up',
    'HEURISTIC_PIPELINE',
    'FALLBACK_PIPELINE',
    'run_pipeline',
]


@dataclass(frozen=True)
class DistributionPolicy:
    """
    分配策略参数表

    各档位的比例是经验值，可按需调整；正确性只依赖金额守恒，不依赖具体比例。
    """
    seed_ratio: Decimal = Decimal("0.25")          # 面值低于买入额该比例时先发1枚
    large_tier_ratio: Decimal = Decimal("0.10")    # 面值 >= 买入额×该比例 为大面值
    mid_tier_ratio: Decimal = Decimal("0.01")      # 面值 >= 买入额×该比例 为中面值
    large_share: Decimal = Decimal("0.50")
    mid_share: Decimal = Decimal("0.30")
    small_share: Decimal = Decimal("0.10")
    sub_unit_threshold: Decimal = Decimal("1")     # 低于该面值的筹码按倍数取整
    sub_unit_multiple: int = 5
    tolerance: Decimal = MONEY_TOLERANCE
    minor_unit_digits: int = MINOR_UNIT_DIGITS

    def __post_init__(self):
        """规范化并验证参数"""
        for name in ('seed_ratio', 'large_tier_ratio', 'mid_tier_ratio', 'large_share',
                     'mid_share', 'small_share', 'sub_unit_threshold', 'tolerance'):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        for name in ('large_share', 'mid_share', 'small_share'):
            share = getattr(self, name)
            if share <= 0 or share > 1:
                raise ValueError(f"{name}必须在(0, 1]之间，当前为: {share}")
        if self.seed_ratio < 0:
            raise ValueError(f"seed_ratio不能为负数: {self.seed_ratio}")
        if self.mid_tier_ratio > self.large_tier_ratio:
            raise ValueError("mid_tier_ratio不能大于large_tier_ratio")
        if self.sub_unit_multiple < 1:
            raise ValueError(f"sub_unit_multiple必须至少为1: {self.sub_unit_multiple}")
        if self.tolerance < 0:
            raise ValueError(f"tolerance不能为负数: {self.tolerance}")
        if self.minor_unit_digits < 0:
            raise ValueError(f"minor_unit_digits不能为负数: {self.minor_unit_digits}")

    def tier_share(self, face_value: Decimal, amount: Decimal) -> Decimal:
        """根据面值相对买入额所处的档位，返回目标比例"""
        if face_value >= amount * self.large_tier_ratio:
            return self.large_share
        if face_value >= amount * self.mid_tier_ratio:
            return self.mid_share
        return self.small_share

    def round_sub_unit_count(self, count: int) -> int:
        """小于1的面值：数量取整到最接近的sub_unit_multiple倍数"""
        multiple = self.sub_unit_multiple
        steps = (Decimal(count) / multiple).quantize(Decimal(1), rounding=ROUND_HALF_UP)
        return int(steps) * multiple


@dataclass(frozen=True)
class AllocationState:
    """分配过程中的状态: 剩余金额与已分配的筹码数量"""
    remaining: Decimal
    counts: Dict[int, int] = field(default_factory=dict)

    def allocate(self, denomination: Denomination, count: int,
                 digits: int = MINOR_UNIT_DIGITS) -> 'AllocationState':
        """
        分配count枚指定面值的筹码

        Returns:
            新的状态（原状态不变）
        """
        if count < 0:
            raise ValueError(f"分配数量不能为负数: {count}")
        counts = dict(self.counts)
        counts[denomination.denomination_id] = counts.get(denomination.denomination_id, 0) + count
        remaining = money_sub(self.remaining, denomination.face_value * count, digits)
        return replace(self, remaining=remaining, counts=counts)


@dataclass(frozen=True)
class AllocationContext:
    """分配上下文: 目标金额、面值集合与策略参数"""
    amount: Decimal
    chip_set: ChipSet
    policy: DistributionPolicy = field(default_factory=DistributionPolicy)

    @property
    def digits(self) -> int:
        return self.policy.minor_unit_digits

    def ascending(self) -> List[Denomination]:
        return [d for d in self.chip_set.ascending() if d.is_usable]

    def descending(self) -> List[Denomination]:
        return [d for d in self.chip_set.descending() if d.is_usable]

    def initial_state(self) -> AllocationState:
        return AllocationState(remaining=quantize_money(self.amount, self.digits))


AllocationStrategy = Callable[[AllocationState, AllocationContext], AllocationState]


def seed_variety(state: AllocationState, ctx: AllocationContext) -> AllocationState:
    """从小到大，面值较小且剩余足够两枚时先发1枚"""
    threshold = ctx.amount * ctx.policy.seed_ratio
    for denomination in ctx.ascending():
        face_value = denomination.face_value
        if face_value < threshold and state.remaining >= face_value * 2:
            state = state.allocate(denomination, 1, ctx.digits)
    return state


def proportional_share(state: AllocationState, ctx: AllocationContext) -> AllocationState:
    """从大到小，每种面值分配当前剩余金额的档位比例，超额则不提交"""
    policy = ctx.policy
    for denomination in ctx.descending():
        face_value = denomination.face_value
        target = state.remaining * policy.tier_share(face_value, ctx.amount)
        count = int(target // face_value)
        if face_value < policy.sub_unit_threshold:
            count = policy.round_sub_unit_count(count)
        if count <= 0 or face_value * count > state.remaining:
            continue
        state = state.allocate(denomination, count, ctx.digits)
    return state


def _greedy(state: AllocationState, ctx: AllocationContext,
            denominations: List[Denomination]) -> AllocationState:
    for denomination in denominations:
        if state.remaining <= 0:
            break
        count = int(state.remaining // denomination.face_value)
        if count > 0:
            state = state.allocate(denomination, count, ctx.digits)
    return state


def greedy_fill(state: AllocationState, ctx: AllocationContext) -> AllocationState:
    """从大到小贪心填充"""
    return _greedy(state, ctx, ctx.descending())


def residual_mop_up(state: AllocationState, ctx: AllocationContext) -> AllocationState:
    """从小到大再贪心一次"""
    return _greedy(state, ctx, ctx.ascending())


HEURISTIC_PIPELINE: Tuple[AllocationStrategy, ...] = (
    seed_variety,
    proportional_share,
    greedy_fill,
    residual_mop_up,
)

FALLBACK_PIPELINE: Tuple[AllocationStrategy, ...] = (greedy_fill,)


def run_pipeline(pipeline: Tuple[AllocationStrategy, ...], ctx: AllocationContext,
                 state: Optional[AllocationState] = None,
                 on_step: Optional[Callable[[str, AllocationState], None]] = None) -> AllocationState:
    """
    按顺序执行分配策略

    Args:
        pipeline: 策略元组
        ctx: 分配上下文
        state: 初始状态，None时从目标金额开始
        on_step: 每个策略执行后的回调(策略名, 状态)

    Returns:
        最终状态
    """
    if state is None:
        state = ctx.initial_state()
    for strategy in pipeline:
        state = strategy(state, ctx)
        if on_step is not None:
            on_step(strategy.__name__, state)
    return state
