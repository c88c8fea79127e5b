"""筹码分配策略测试.

每个策略都是纯函数，可以单独测试。
"""

from decimal import Decimal

import pytest

from poker_manager.core.chips import (
    FALLBACK_PIPELINE,
    HEURISTIC_PIPELINE,
    AllocationContext,
    AllocationState,
    ChipSet,
    DistributionPolicy,
    greedy_fill,
    proportional_share,
    residual_mop_up,
    run_pipeline,
    seed_variety,
)


class TestDistributionPolicy:
    """分配策略参数测试类."""

    def test_defaults(self):
        """测试默认参数."""
        policy = DistributionPolicy()
        assert policy.large_share == Decimal("0.50")
        assert policy.mid_share == Decimal("0.30")
        assert policy.small_share == Decimal("0.10")
        assert policy.sub_unit_multiple == 5

    def test_string_values_normalized(self):
        """测试字符串参数被转换为Decimal."""
        policy = DistributionPolicy(large_share="0.6", tolerance="0.001")
        assert policy.large_share == Decimal("0.6")
        assert policy.tolerance == Decimal("0.001")

    @pytest.mark.parametrize("kwargs", [
        {'large_share': "0"},
        {'mid_share': "1.5"},
        {'seed_ratio': "-0.1"},
        {'mid_tier_ratio': "0.5", 'large_tier_ratio': "0.1"},
        {'sub_unit_multiple': 0},
        {'tolerance': "-0.01"},
        {'minor_unit_digits': -1},
    ])
    def test_invalid_policy(self, kwargs):
        """测试无效参数被拒绝."""
        with pytest.raises(ValueError):
            DistributionPolicy(**kwargs)

    def test_tier_share(self):
        """测试面值档位相对目标金额划分."""
        policy = DistributionPolicy()
        amount = Decimal("37")
        assert policy.tier_share(Decimal("10"), amount) == policy.large_share
        assert policy.tier_share(Decimal("1"), amount) == policy.mid_share
        assert policy.tier_share(Decimal("0.25"), amount) == policy.small_share

    @pytest.mark.parametrize("count,expected", [(10, 10), (12, 10), (13, 15), (2, 0), (3, 5), (0, 0)])
    def test_round_sub_unit_count(self, count, expected):
        """测试小面值数量取整到5的倍数."""
        assert DistributionPolicy().round_sub_unit_count(count) == expected


class TestAllocationState:
    """分配状态测试类."""

    def test_allocate_returns_new_state(self, default_chip_set):
        """测试分配返回新状态，原状态不变."""
        state = AllocationState(remaining=Decimal("5.00"))
        chip = default_chip_set.get(2)
        new_state = state.allocate(chip, 3)
        assert new_state.remaining == Decimal("3.50")
        assert new_state.counts == {2: 3}
        assert state.remaining == Decimal("5.00")
        assert state.counts == {}

    def test_negative_count_rejected(self, default_chip_set):
        """测试负数数量被拒绝."""
        with pytest.raises(ValueError):
            AllocationState(remaining=Decimal("5")).allocate(default_chip_set.get(1), -1)


class TestStrategies:
    """单个分配策略测试类."""

    def setup_method(self):
        """测试前设置"""
        self.amount = Decimal("37.00")

    def _ctx(self, chip_set):
        return AllocationContext(amount=self.amount, chip_set=chip_set)

    def test_seed_variety(self, default_chip_set):
        """测试小面值先各发1枚."""
        ctx = self._ctx(default_chip_set)
        state = seed_variety(ctx.initial_state(), ctx)
        # 10 不低于 37 × 0.25，不参与
        assert state.counts == {1: 1, 2: 1, 3: 1}
        assert state.remaining == Decimal("35.25")

    def test_seed_variety_requires_two_units_remaining(self, default_chip_set):
        """测试剩余不足两枚面值时不发种子筹码."""
        ctx = AllocationContext(amount=Decimal("0.25"), chip_set=default_chip_set)
        state = seed_variety(ctx.initial_state(), ctx)
        assert state.counts == {}

    def test_proportional_share(self, default_chip_set):
        """测试按档位比例分配且不超额."""
        ctx = self._ctx(default_chip_set)
        state = proportional_share(AllocationState(remaining=Decimal("35.25")), ctx)
        assert state.counts == {4: 1, 3: 7, 2: 10, 1: 5}
        assert state.remaining == Decimal("12.00")

    def test_greedy_fill(self, default_chip_set):
        """测试从大到小贪心."""
        ctx = self._ctx(default_chip_set)
        state = greedy_fill(ctx.initial_state(), ctx)
        assert state.counts == {4: 3, 3: 7}
        assert state.remaining == Decimal("0.00")

    def test_residual_mop_up_uses_smallest_first(self, default_chip_set):
        """测试残留从小面值开始收拾."""
        ctx = self._ctx(default_chip_set)
        state = residual_mop_up(AllocationState(remaining=Decimal("0.75")), ctx)
        assert state.counts == {1: 3}
        assert state.remaining == Decimal("0.00")

    def test_zero_value_denominations_ignored(self):
        """测试面值为0的筹码从不分配."""
        chip_set = ChipSet.from_values([("0", "#000", "Marker"), ("1", "#fff", "Branca")])
        ctx = AllocationContext(amount=Decimal("4"), chip_set=chip_set)
        state = run_pipeline(HEURISTIC_PIPELINE, ctx)
        assert 1 not in state.counts or state.counts[1] == 0
        assert state.remaining == Decimal("0.00")

    def test_run_pipeline_reports_each_step(self, default_chip_set):
        """测试流水线对每个策略回调一次."""
        ctx = self._ctx(default_chip_set)
        steps = []
        final = run_pipeline(HEURISTIC_PIPELINE, ctx, on_step=lambda name, state: steps.append(name))
        assert steps == ['seed_variety', 'proportional_share', 'greedy_fill', 'residual_mop_up']
        assert final.remaining == Decimal("0.00")
        assert default_chip_set.total_value(final.counts) == self.amount

    def test_fallback_pipeline_is_pure_greedy(self):
        """测试兜底流程只有纯贪心."""
        assert FALLBACK_PIPELINE == (greedy_fill,)
